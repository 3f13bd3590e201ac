import zstandard as zstd


def str_to_bool(s: str) -> bool:
    return s.lower() in ["true", "1", "t", "y", "yes"]


def compress_json_str(json_str: str, compression_level: int = 3) -> bytes:
    compressor = zstd.ZstdCompressor(level=compression_level)
    return compressor.compress(json_str.encode("utf-8"))


def decompress_json_str(compressed_data: bytes) -> str:
    decompressor = zstd.ZstdDecompressor()
    return decompressor.decompress(compressed_data).decode("utf-8")
