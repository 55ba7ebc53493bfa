class CryptoError(Exception):
    """Exception de base pour les primitives cryptographiques"""
    pass

class InvalidArgumentError(CryptoError, ValueError):
    """Entrée de l'appelant mal formée ou hors domaine (exposant négatif, courbe inconnue, point invalide...)"""
    pass

class InternalError(CryptoError):
    """Échec du moteur arithmétique sous-jacent, inattendu en fonctionnement normal"""
    pass
