import logging
from enum import Enum
from typing import Optional, Tuple

import crypto_config
from crypto_errors import InvalidArgumentError
from scratch_context import Context

logger = logging.getLogger(__name__)

class ExpStrategy(Enum):
    """Stratégies d'exponentiation, choisies une fois pour toutes à la construction"""
    DIRECT = "direct"              # pow() à chaque appel, aucun précalcul
    BINARY_TABLE = "binary_table"  # table des base^(2^j), fenêtre k = 1
    KARY_COMB = "kary_comb"        # peigne 2^k-aire généralisé

def direct_cost(bits: int) -> int:
    """Nombre moyen de multiplications de l'algorithme carré-multiplication"""
    return bits + bits // 2

def table_rows(bits: int, window_bits: int) -> int:
    return max(1, -(-bits // window_bits))

def setup_cost(bits: int, window_bits: int) -> int:
    """Multiplications nécessaires pour construire la table (2^k - 1 par ligne)"""
    return table_rows(bits, window_bits) * ((1 << window_bits) - 1)

def choose_window_bits(bits: int, expected_calls: int,
                       max_window_bits: int = crypto_config.MAX_WINDOW_BITS) -> int:
    """
    Choisit la largeur de fenêtre k du peigne 2^k-aire

    Minimise le coût total estimé : construction de la table
    (t * (2^k - 1)) plus t multiplications par appel, avec t = ceil(bits / k).

    Args:
        bits: La taille en bits du module
        expected_calls: Le nombre d'exponentiations attendues
        max_window_bits: La largeur maximale autorisée

    Returns:
        int: La largeur k, au moins 2
    """
    best_k, best_cost = 2, None
    for k in range(2, max(2, max_window_bits) + 1):
        rows = table_rows(bits, k)
        cost = setup_cost(bits, k) + expected_calls * rows
        if best_cost is None or cost < best_cost:
            best_k, best_cost = k, cost
    return best_k

def precomputation_amortizes(bits: int, expected_calls: int, window_bits: int) -> bool:
    """Indique si la table est rentable par rapport à pow() sur expected_calls appels"""
    with_table = setup_cost(bits, window_bits) + expected_calls * table_rows(bits, window_bits)
    return with_table < expected_calls * direct_cost(bits)

class FixedBaseExp:
    """
    Exponentiation modulaire répétée d'une base fixe : calcule base^e mod n
    pour une base et un module constants et des exposants variables.

    La stratégie (ExpStrategy) est choisie une fois à la construction, le
    précalcul est ainsi amorti sur les appels suivants. La table est immuable
    après construction. L'objet ne peut être ni copié ni sérialisé.

    Les multiplications passent par le contexte fourni, qui n'est pas
    thread-safe : deux threads ne doivent pas partager le même contexte.
    """

    def __init__(self, ctx: Context, fixed_base: int, modulus: int,
                 strategy: ExpStrategy = ExpStrategy.DIRECT, window_bits: int = 1,
                 max_exp_bits: Optional[int] = None):
        self._ctx = ctx
        self._modulus = modulus
        self._base = fixed_base % modulus
        self._strategy = strategy
        self._window_bits = 0 if strategy is ExpStrategy.DIRECT else window_bits
        # Taille maximale des exposants couverts par la table
        self._max_exp_bits = max_exp_bits or modulus.bit_length()
        self._table: Tuple[Tuple[int, ...], ...] = ()

        if strategy is ExpStrategy.BINARY_TABLE and window_bits != 1:
            raise InvalidArgumentError("La table binaire utilise une fenêtre de 1 bit")
        if strategy is not ExpStrategy.DIRECT:
            if window_bits < 1:
                raise InvalidArgumentError("Largeur de fenêtre invalide")
            self._table = self._build_table()

    @staticmethod
    def get_fixed_base_exp(ctx: Context, fixed_base: int, modulus: int,
                           expected_calls: Optional[int] = None,
                           two_k_ary: Optional[bool] = None,
                           max_exp_bits: Optional[int] = None) -> 'FixedBaseExp':
        """
        Crée un FixedBaseExp en choisissant la stratégie adaptée

        Args:
            ctx: Le contexte de calcul de la session
            fixed_base: La base fixe
            modulus: Le module (strictement positif)
            expected_calls: Le nombre d'appels à mod_exp attendus
                (crypto_config.DEFAULT_EXPECTED_CALLS par défaut)
            two_k_ary: True pour le peigne 2^k-aire, False pour la table
                binaire (crypto_config.TWO_K_ARY_EXP par défaut)
            max_exp_bits: La taille maximale des exposants attendus
                (taille du module par défaut), les exposants plus longs
                restent acceptés

        Returns:
            FixedBaseExp: DIRECT si le précalcul n'est pas rentable
        """
        if expected_calls is None:
            expected_calls = crypto_config.DEFAULT_EXPECTED_CALLS
        if two_k_ary is None:
            two_k_ary = crypto_config.TWO_K_ARY_EXP

        bits = max_exp_bits or modulus.bit_length()
        if two_k_ary:
            strategy = ExpStrategy.KARY_COMB
            window_bits = choose_window_bits(bits, expected_calls)
        else:
            strategy = ExpStrategy.BINARY_TABLE
            window_bits = 1

        if not precomputation_amortizes(bits, expected_calls, window_bits):
            strategy, window_bits = ExpStrategy.DIRECT, 0

        logger.debug("Exponentiation à base fixe : exposants de %d bits, %d appels attendus, "
                     "stratégie %s (k=%d)", bits, expected_calls, strategy.value, window_bits)
        return FixedBaseExp(ctx, fixed_base, modulus, strategy, window_bits, max_exp_bits)

    @property
    def strategy(self) -> ExpStrategy:
        return self._strategy

    @property
    def window_bits(self) -> int:
        return self._window_bits

    @property
    def table_size(self) -> int:
        """Nombre d'entrées précalculées"""
        return sum(len(row) for row in self._table)

    def _build_table(self) -> Tuple[Tuple[int, ...], ...]:
        """
        Construit table[j][d] = base^(d * 2^(k*j)) mod n pour d dans [0, 2^k-1]
        """
        ctx, modulus, k = self._ctx, self._modulus, self._window_bits
        one = 1 % modulus
        row_base = self._base
        rows = []
        for _ in range(table_rows(self._max_exp_bits, k)):
            row = [one, row_base]
            for _ in range(2, 1 << k):
                row.append(ctx.mod_mul(row[-1], row_base, modulus))
            rows.append(tuple(row))
            # base^(2^(k*(j+1))) = base^((2^k - 1) * 2^(k*j)) * base^(2^(k*j))
            row_base = ctx.mod_mul(row[-1], row_base, modulus)

        logger.debug("Table précalculée : %d lignes de %d entrées", len(rows), 1 << k)
        return tuple(rows)

    def _comb_mod_exp(self, exp: int) -> int:
        ctx, modulus = self._ctx, self._modulus
        mask = (1 << self._window_bits) - 1
        result = 1 % modulus
        for row in self._table:
            if not exp:
                break
            digit = exp & mask
            if digit:
                result = ctx.mod_mul(result, row[digit], modulus)
            exp >>= self._window_bits
        return result

    def mod_exp(self, exp: int) -> int:
        """
        Calcule base^exp mod n

        Args:
            exp: L'exposant, positif ou nul

        Returns:
            int: base^exp mod n (1 mod n pour exp = 0)

        Raises:
            InvalidArgumentError: Si l'exposant est négatif
        """
        if exp < 0:
            raise InvalidArgumentError("L'exposant doit être positif ou nul")

        if self._strategy is ExpStrategy.DIRECT:
            return pow(self._base, exp, self._modulus)
        if exp.bit_length() > self._max_exp_bits:
            # Exposant plus long que la table
            return pow(self._base, exp, self._modulus)
        return self._comb_mod_exp(exp)

    def __reduce_ex__(self, protocol):
        raise TypeError("FixedBaseExp ne peut être ni copié ni sérialisé")

    def __repr__(self) -> str:
        return (f"FixedBaseExp(strategy={self._strategy.value}, window_bits={self._window_bits}, "
                f"modulus_bits={self._modulus.bit_length()})")
