from typing import Tuple

from crypto_errors import InvalidArgumentError
from ec_group import ECGroup
from scratch_context import Context

Ciphertext = Tuple[bytes, bytes]

def ECEG_encode(group: ECGroup, message: int) -> bytes:
    """
    Encode un entier en point m·G de la courbe

    Args:
        group: La courbe
        message: Un entier dans [1, ordre-1]

    Returns:
        bytes: Le point m·G encodé sous forme compressée

    Raises:
        InvalidArgumentError: Si le message est hors de [1, ordre-1]
    """
    if not isinstance(message, int) or not 0 < message < group.get_order():
        raise InvalidArgumentError("Le message doit être dans [1, ordre-1]")
    point = group.mul(group.get_generator(), message)
    return group.point_to_bytes_compressed(point)

def ECEG_generate_keys(group: ECGroup, ctx: Context) -> Tuple[int, bytes]:
    """
    Génère une paire de clés EC-ElGamal

    Returns:
        Tuple[int, bytes]: (clé privée x, clé publique x·G encodée)
    """
    private_key = group.generate_private_key(ctx)
    public_key = group.mul(group.get_generator(), private_key)
    return private_key, group.point_to_bytes_compressed(public_key)

def ECEG_encrypt(group: ECGroup, ctx: Context, public_key: bytes, message: bytes) -> Ciphertext:
    """
    Chiffre un point encodé avec EC-ElGamal

    Calcule C1 = k·G et C2 = M + k·Y pour un aléa k.

    Args:
        group: La courbe
        ctx: Le contexte de calcul
        public_key: La clé publique Y encodée
        message: Le point M encodé

    Returns:
        Ciphertext: (C1, C2) encodés sous forme compressée

    Raises:
        InvalidArgumentError: Si la clé publique ou le message n'est pas un
            point valide
    """
    Y = group.create_ec_point(public_key)
    M = group.create_ec_point(message)

    # Génère un nombre aléatoire k dans [1, ordre-1]
    k = group.generate_private_key(ctx)

    C1 = group.mul(group.get_generator(), k)
    S = group.mul(Y, k)
    C2 = group.add(M, S)

    return group.point_to_bytes_compressed(C1), group.point_to_bytes_compressed(C2)

def _unpack(ciphertext: Ciphertext) -> Ciphertext:
    try:
        c1, c2 = ciphertext
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError("Le chiffré ElGamal doit être une paire (c1, c2)") from e
    return c1, c2

def ECEG_decrypt(group: ECGroup, private_key: int, ciphertext: Ciphertext) -> bytes:
    """
    Déchiffre un chiffré EC-ElGamal

    Calcule M = C2 - x·C1, soit C2 + (ordre - x)·C1.

    Returns:
        bytes: Le point M encodé

    Raises:
        InvalidArgumentError: Si la clé privée ou le chiffré est invalide
    """
    if not group.is_private_key_valid(private_key):
        raise InvalidArgumentError("Clé privée invalide")

    c1, c2 = _unpack(ciphertext)
    C1 = group.create_ec_point(c1)
    C2 = group.create_ec_point(c2)

    neg_S = group.mul(C1, group.get_order() - private_key)
    M = group.add(C2, neg_S)
    return group.point_to_bytes_compressed(M)

def ECEG_add(group: ECGroup, first: Ciphertext, second: Ciphertext) -> Ciphertext:
    """
    Additionne deux chiffrés composante par composante

    (k1·G + k2·G, M1 + M2 + (k1 + k2)·Y) est un chiffré de M1 + M2.
    """
    r1, c1 = (group.create_ec_point(part) for part in _unpack(first))
    r2, c2 = (group.create_ec_point(part) for part in _unpack(second))
    return (group.point_to_bytes_compressed(group.add(r1, r2)),
            group.point_to_bytes_compressed(group.add(c1, c2)))
