"""

Fehlerklassen des SPN. Konfigurationsfehler werden bereits beim Erstellen
der Tabellen bzw. des SPN erkannt, Fehler der Zufallsquelle bei der
Schlüsselgenerierung.

"""


class RandomSourceError(OSError):
    """Die sichere Zufallsquelle konnte die benötigten Bytes nicht liefern."""


class InvalidConfiguration(ValueError):
    """Ungültige Rundenzahl, Schlüsselliste, S-Box oder P-Box."""


class PaddingError(ValueError):
    """Ungültiges PKCS#7-Padding."""
