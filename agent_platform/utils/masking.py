def mask_key(key: str) -> str:
    """Render a credential as its first 8 and last 4 characters around an ellipsis."""
    return f"{key[:8]}...{key[-4:]}"
