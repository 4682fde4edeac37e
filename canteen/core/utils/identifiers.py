import uuid


def generate_id() -> str:
    return str(uuid.uuid4())


def short_id(value: str, length: int = 8) -> str:
    return value[:length]
