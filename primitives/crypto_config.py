import os

def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")

# Exponentiation à base fixe
# Si True, utilise le peigne 2^k-aire généralisé, sinon la table binaire (k = 1).
# N'influence que les performances, jamais le résultat.
TWO_K_ARY_EXP = _env_flag("TWO_K_ARY_EXP", True)

# Nombre d'appels attendus quand l'appelant ne le précise pas
DEFAULT_EXPECTED_CALLS = int(os.environ.get("FIXED_BASE_EXPECTED_CALLS", "256"))

# Largeur de fenêtre maximale du peigne (la table contient 2^k entrées par ligne)
MAX_WINDOW_BITS = 8

# Chiffrement commutatif
# NID_secp224r1 : sécurité de 112 bits
DEFAULT_CURVE_ID = 713

# Nombre maximal d'essais pour le hachage vers la courbe
HASH_TO_CURVE_MAX_ATTEMPTS = 1000
