"""Pure composition engine: schemes, syllables, tones, buffers, transcoding."""
