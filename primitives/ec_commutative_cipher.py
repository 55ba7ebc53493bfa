import logging
from typing import Tuple

from Crypto.PublicKey import ECC
from Crypto.Util.number import bytes_to_long, long_to_bytes

from crypto_errors import InvalidArgumentError
from ec_group import ECGroup, get_ec_group
from scratch_context import Context

logger = logging.getLogger(__name__)

class ECCommutativeCipher:
    """
    Chiffrement commutatif sur courbe elliptique : K1(K2(a)) = K2(K1(a))
    où K(a) est le chiffrement de a avec la clé K.
    (https://eprint.iacr.org/2008/356.pdf)

    Permet à deux parties de savoir si elles partagent une même valeur sans
    se la révéler. Le chiffrement est déterministe : une nouvelle clé doit
    être créée pour chaque session et les valeurs doivent y être uniques.

    Permet aussi de rechiffrer de façon homomorphe un chiffré ElGamal (c1, c2)
    avec la clé K : si le chiffré était celui de m, le résultat est
    effectivement un chiffré de K(m). Ce rechiffrement ne réaléatoise pas le
    chiffré et n'est sûr que si les messages m sont pseudo-aléatoires.

    La sécurité est de la moitié de la taille de la courbe : P-224
    (NID 713) donne 112 bits.

    Cette classe n'est pas thread-safe. Elle ne peut être ni copiée ni
    sérialisée ; la clé s'exporte avec get_private_key_bytes().
    """

    def __init__(self, ctx: Context, group: ECGroup, private_key: int):
        self._ctx = ctx
        self._group = group
        self._private_key = private_key
        # Inverse de la clé modulo l'ordre, utilisé pour le déchiffrement
        self._private_key_inverse = ctx.mod_inverse(private_key, group.get_order())

    @classmethod
    def create_with_new_key(cls, curve_id: int, ctx: Context) -> 'ECCommutativeCipher':
        """
        Crée un chiffrement avec une nouvelle clé privée aléatoire

        À utiliser quand la clé est créée pour la première fois ou doit être
        renouvelée.

        Args:
            curve_id: L'identifiant (NID) de la courbe nommée
            ctx: Le contexte de calcul de la session

        Raises:
            InvalidArgumentError: Si la courbe n'est pas supportée
            InternalError: Si une opération arithmétique échoue
        """
        group = get_ec_group(curve_id)
        private_key = group.generate_private_key(ctx)
        logger.debug("Nouvelle clé de chiffrement commutatif sur %s", group.curve_name)
        return cls(ctx, group, private_key)

    @classmethod
    def create_from_key(cls, curve_id: int, key_bytes: bytes, ctx: Context) -> 'ECCommutativeCipher':
        """
        Crée un chiffrement à partir d'une clé privée existante

        À utiliser quand la clé est conservée pour servir à plusieurs étapes
        du protocole dans une même session, ou par plusieurs processus.

        Args:
            curve_id: L'identifiant (NID) de la courbe nommée
            key_bytes: La clé privée (octets big-endian, voir get_private_key_bytes)
            ctx: Le contexte de calcul de la session

        Raises:
            InvalidArgumentError: Si la courbe n'est pas supportée ou si la
                clé n'est pas dans [1, ordre-1]
            InternalError: Si une opération arithmétique échoue
        """
        group = get_ec_group(curve_id)
        if not isinstance(key_bytes, (bytes, bytearray)):
            raise InvalidArgumentError("La clé privée doit être une suite d'octets")
        private_key = bytes_to_long(bytes(key_bytes)) if key_bytes else 0
        if not group.is_private_key_valid(private_key):
            raise InvalidArgumentError("Clé privée invalide pour cette courbe")
        return cls(ctx, group, private_key)

    @property
    def group(self) -> ECGroup:
        return self._group

    @property
    def curve_id(self) -> int:
        return self._group.curve_id

    def _encrypt_point(self, point: ECC.EccPoint) -> ECC.EccPoint:
        return self._group.mul(point, self._private_key)

    def hash_to_curve(self, plaintext: bytes) -> bytes:
        """Point haché (non chiffré) du message, encodé sous forme compressée"""
        point = self._hash_to_point(plaintext)
        return self._group.point_to_bytes_compressed(point)

    def _hash_to_point(self, plaintext: bytes) -> ECC.EccPoint:
        if not isinstance(plaintext, (bytes, bytearray)):
            raise InvalidArgumentError("Le message doit être une suite d'octets")
        return self._group.get_point_by_hashing_to_curve(self._ctx, bytes(plaintext))

    def encrypt(self, plaintext: bytes) -> bytes:
        """
        Chiffre un message vers un point de la courbe

        Le message est haché vers un point de la courbe qui est ensuite
        multiplié par la clé privée.

        Returns:
            bytes: Le point chiffré, encodé sous forme compressée (ANSI X9.62)

        Raises:
            InvalidArgumentError: Si aucun point ne peut être dérivé du message
        """
        point = self._hash_to_point(plaintext)
        return self._group.point_to_bytes_compressed(self._encrypt_point(point))

    def re_encrypt(self, ciphertext: bytes) -> bytes:
        """
        Chiffre un point encodé avec la clé privée

        Sert à surchiffrer une valeur déjà chiffrée par une autre partie, ou
        à chiffrer une valeur déjà hachée vers la courbe.

        Raises:
            InvalidArgumentError: Si l'entrée n'est pas l'encodage d'un point
                valide de cette courbe
        """
        point = self._group.create_ec_point(ciphertext)
        return self._group.point_to_bytes_compressed(self._encrypt_point(point))

    def re_encrypt_elgamal_ciphertext(self, elgamal_ciphertext: Tuple[bytes, bytes]) -> Tuple[bytes, bytes]:
        """
        Chiffre un chiffré ElGamal (c1, c2) avec la clé privée

        Retourne (d·c1, d·c2) : le message contenu est multiplié par d, le
        bruit du chiffré n'est pas renouvelé.

        Raises:
            InvalidArgumentError: Si l'un des deux composants n'est pas
                l'encodage d'un point valide de cette courbe
        """
        try:
            c1, c2 = elgamal_ciphertext
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError("Le chiffré ElGamal doit être une paire (c1, c2)") from e

        p1 = self._group.create_ec_point(c1)
        p2 = self._group.create_ec_point(c2)
        return (self._group.point_to_bytes_compressed(self._encrypt_point(p1)),
                self._group.point_to_bytes_compressed(self._encrypt_point(p2)))

    def decrypt(self, ciphertext: bytes) -> bytes:
        """
        Déchiffre un point encodé avec la clé privée

        Si le point était doublement chiffré (avec cette clé et une autre),
        le résultat reste chiffré avec l'autre clé. S'il n'était chiffré
        qu'avec cette clé, le résultat est le point haché d'origine : le
        hachage vers la courbe n'est pas inversé.

        Raises:
            InvalidArgumentError: Si l'entrée n'est pas l'encodage d'un point
                valide de cette courbe
        """
        point = self._group.create_ec_point(ciphertext)
        decrypted = self._group.mul(point, self._private_key_inverse)
        return self._group.point_to_bytes_compressed(decrypted)

    def get_private_key_bytes(self) -> bytes:
        """Retourne la clé privée (octets big-endian) pour la conserver et la réutiliser"""
        return long_to_bytes(self._private_key)

    def __reduce_ex__(self, protocol):
        raise TypeError("ECCommutativeCipher ne peut être ni copié ni sérialisé")

    def __repr__(self) -> str:
        return f"ECCommutativeCipher(curve={self._group.curve_name})"
