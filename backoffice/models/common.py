import secrets
import string


def generate_custom_id(prefix: str, length: int = 8) -> str:
    random_part = ''.join(secrets.choice(string.ascii_uppercase)
                          for _ in range(length))
    return f"{prefix}-{random_part}"


def generate_numeric_code(prefix: str, digits: int = 5) -> str:
    """Human-facing document numbers such as P48213 or EXP104233."""
    low = 10 ** (digits - 1)
    return f"{prefix}{low + secrets.randbelow(9 * low)}"
