from .embedding import generate_and_store_content_embedding

__all__ = [
    "generate_and_store_content_embedding",
]
