"""LZ command streams: single-pass, literal and repetition compressors, encoding and decoding."""