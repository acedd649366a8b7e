"""Random password generation."""

import secrets
import string

MIN_MIXED_LENGTH = 4


def generate_password(length: int = 16, use_symbols: bool = True) -> str:
    """Generate a random password from a cryptographically secure source.

    Passwords of four or more characters contain at least one uppercase
    letter, one lowercase letter, one digit and, if enabled, one symbol.

    Args:
        length: Number of characters.
        use_symbols: Include punctuation characters.

    Returns:
        The generated password.

    Raises:
        ValueError: If length is less than 1.
    """
    if length < 1:
        raise ValueError("Password length must be at least 1")

    groups = [string.ascii_uppercase, string.ascii_lowercase, string.digits]
    if use_symbols:
        groups.append(string.punctuation)
    alphabet = "".join(groups)

    if length < MIN_MIXED_LENGTH:
        return "".join(secrets.choice(alphabet) for _ in range(length))

    chars = [secrets.choice(group) for group in groups]
    chars += [secrets.choice(alphabet) for _ in range(length - len(chars))]

    # Shuffle so the guaranteed characters are not always in front
    for i in range(len(chars) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        chars[i], chars[j] = chars[j], chars[i]
    return "".join(chars)
