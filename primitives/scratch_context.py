from Crypto.Hash import SHA256
from Crypto.Util.number import long_to_bytes
from secrets import randbelow

from crypto_errors import InternalError

HASH_OUTPUT_BITS = 256

class Context:
    """
    Contexte de calcul partagé par les primitives (exponentiation à base fixe,
    groupe de courbe elliptique, chiffrement commutatif).

    Le contexte appartient à la session de l'appelant : les primitives le
    reçoivent par référence et ne le possèdent jamais. Il n'est pas thread-safe,
    chaque thread doit utiliser son propre contexte.
    """

    def __init__(self):
        # Compteur de multiplications modulaires effectuées via mod_mul
        self.multiplications = 0

    def reset_counters(self) -> None:
        """Remet à zéro le compteur de multiplications"""
        self.multiplications = 0

    def mod_mul(self, a: int, b: int, modulus: int) -> int:
        """Calcule (a * b) mod modulus en comptant l'opération"""
        self.multiplications += 1
        return (a * b) % modulus

    def mod_inverse(self, a: int, modulus: int) -> int:
        """
        Calcule l'inverse modulaire de a

        Raises:
            InternalError: Si a n'est pas inversible modulo modulus
        """
        try:
            return pow(a, -1, modulus)
        except ValueError as e:
            raise InternalError("Inverse modulaire inexistant") from e

    def generate_random_less_than(self, bound: int) -> int:
        """Tire un entier uniforme dans [0, bound-1]"""
        if bound <= 0:
            raise InternalError("La borne doit être positive")
        return randbelow(bound)

    def generate_random_between(self, low: int, high: int) -> int:
        """Tire un entier uniforme dans [low, high-1]"""
        if high <= low:
            raise InternalError("Intervalle vide")
        return low + randbelow(high - low)

    def sha256(self, data: bytes) -> bytes:
        return SHA256.new(data).digest()

    def random_oracle_sha256(self, data: bytes, max_value: int) -> int:
        """
        Oracle aléatoire à valeurs dans [0, max_value-1] construit sur SHA-256

        Concatène SHA256(I2OSP(i) || data) pour i = 1, 2, ... jusqu'à obtenir
        bit_length(max_value) + 256 bits, retire les bits en excès puis réduit
        modulo max_value. Les 256 bits supplémentaires rendent le biais de la
        réduction négligeable.

        Args:
            data: Les octets à hacher
            max_value: La borne supérieure (exclue)

        Returns:
            int: Un entier déterministe dans [0, max_value-1]
        """
        if max_value <= 0:
            raise InternalError("La borne de l'oracle doit être positive")

        output_bits = max_value.bit_length() + HASH_OUTPUT_BITS
        iterations = (output_bits + HASH_OUTPUT_BITS - 1) // HASH_OUTPUT_BITS
        excess_bits = iterations * HASH_OUTPUT_BITS - output_bits

        output = 0
        for i in range(1, iterations + 1):
            digest = self.sha256(long_to_bytes(i) + bytes(data))
            output = (output << HASH_OUTPUT_BITS) + int.from_bytes(digest, byteorder='big')

        return (output >> excess_bits) % max_value
