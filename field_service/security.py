# ==============================================================================
# CONTRASEÑAS
# ==============================================================================
# Las contraseñas se guardan con hash werkzeug. Los snapshots antiguos traen
# la contraseña en texto plano: se siguen aceptando (legacy) al comparar.
# ==============================================================================

from werkzeug.security import check_password_hash, generate_password_hash

_HASH_PREFIXES = ('pbkdf2:', 'scrypt:')


def is_password_hash(stored: str) -> bool:
    return bool(stored) and stored.startswith(_HASH_PREFIXES)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(stored: str, password: str) -> bool:
    """
    Compara una contraseña contra el valor almacenado.

    Args:
        stored: Hash werkzeug o texto plano legado
        password: Contraseña ingresada por el usuario
    """
    if not stored:
        return False
    if is_password_hash(stored):
        return check_password_hash(stored, password)
    return stored == password
