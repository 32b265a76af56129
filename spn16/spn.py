"""

Dieses Programm beinhaltet das 16-Bit SPN mit 4-Bit S-Box und P-Box über alle
16 Bitstellen. Die Klasse SPN beinhaltet die Verschlüsselung (encrypt) und
Entschlüsselung (decrypt) beliebig vieler 16-Bit Blöcke mit einer Liste von
rounds + 1 Rundenschlüsseln.

Zu beachten ist, dass die letzte Substitutionsrunde keine Permutation beinhaltet.
Stattdessen folgt ein abschliessendes Key Mixing mit dem letzten Rundenschlüssel.
Genau diese unpermutierte letzte S-Box-Schicht wird bei der linearen Kryptoanalyse
angegriffen.

"""

from spn16.errors import InvalidConfiguration
from spn16.tables import DEFAULT_TABLES, make_tables


def substitute(block, sbox):
    """
    Ersetzt jedes der vier Nibbles des Blocks gemäss der S-Box,
    wobei die Position des Nibbles erhalten bleibt.
    """
    return (sbox[(block >> 12) & 0xF] << 12 |
            sbox[(block >> 8) & 0xF] << 8 |
            sbox[(block >> 4) & 0xF] << 4 |
            sbox[block & 0xF])


def permute(block, pbox):
    """
    Verschiebt Bit i des Blocks an die Stelle pbox[i].
    """
    permuted = 0
    for i in range(16):
        bit = (block >> i) & 1
        permuted |= bit << pbox[i]
    return permuted


def round_transform(block, round_key, sbox, pbox):
    """Eine nicht-letzte Runde: Key Mixing, Substitution, Permutation."""
    return permute(substitute(block ^ round_key, sbox), pbox)


class SPN:
    def __init__(self, rounds=4, tables=DEFAULT_TABLES):
        """
        Initialisiert das SPN. Die Tabellen (inklusive Inversen) werden
        als fertiges Tables-Objekt übergeben und nicht mehr verändert.
        Nicht bijektive Tabellen oder falsche Inverse werden hier bereits
        abgewiesen, also vor jeder Verschlüsselung.

        Args:
            rounds: Anzahl Substitutionsrunden, mindestens 2
            tables: Tables-Objekt aus spn16.tables.make_tables
        """
        if isinstance(rounds, bool) or not isinstance(rounds, int) or rounds < 2:
            raise InvalidConfiguration(f"rounds must be an integer >= 2, got {rounds!r}")

        checked = make_tables(tables.sbox, tables.pbox)
        if tuple(tables.inv_sbox) != checked.inv_sbox or tuple(tables.inv_pbox) != checked.inv_pbox:
            raise InvalidConfiguration("inverse tables do not match sbox/pbox")
        tables = checked

        self.rounds = rounds
        self.tables = tables
        self.sbox = tables.sbox
        self.inv_sbox = tables.inv_sbox
        self.pbox = tables.pbox
        self.inv_pbox = tables.inv_pbox

    def __repr__(self):
        return f"SPN ({self.rounds} rounds)"

    def check_keys(self, keys):
        if len(keys) != self.rounds + 1:
            raise InvalidConfiguration(
                f"key schedule must contain {self.rounds + 1} round keys, got {len(keys)}")

    def _substitution(self, state):
        return substitute(state, self.sbox)

    def _inv_substitution(self, state):
        return substitute(state, self.inv_sbox)

    def _inv_permutation(self, state):
        return permute(state, self.inv_pbox)

    def encrypt_block(self, plaintext, keys):
        """
        Verschlüsselt einen 16-Bit Klartext. In den ersten rounds - 1 Runden
        wird jeweils ein Key Mixing, Substitutionsvorgang und Permutationsvorgang
        durchgeführt. Die letzte Substitutionsrunde verzichtet auf die
        Permutation, danach folgt das Key Mixing mit keys[rounds].
        """
        state = plaintext & 0xFFFF
        for r in range(self.rounds - 1):
            state = round_transform(state, keys[r], self.sbox, self.pbox)
        state = self._substitution(state ^ keys[self.rounds - 1])
        state ^= keys[self.rounds]
        return state

    def decrypt_block(self, ciphertext, keys):
        """
        Entschlüsselt einen 16-Bit Geheimtext, indem die Schritte der
        Verschlüsselung in umgekehrter Reihenfolge mit inverser S-Box
        und inverser P-Box rückgängig gemacht werden.
        """
        state = (ciphertext & 0xFFFF) ^ keys[self.rounds]
        state = self._inv_substitution(state)
        state ^= keys[self.rounds - 1]
        for r in reversed(range(self.rounds - 1)):
            state = self._inv_substitution(self._inv_permutation(state))
            state ^= keys[r]
        return state

    def encrypt(self, blocks, keys):
        """
        Verschlüsselt jeden Block unabhängig mit demselben Schlüssel
        (kein Verkettungsmodus) und gibt eine neue Liste zurück.
        """
        self.check_keys(keys)
        return [self.encrypt_block(block, keys) for block in blocks]

    def decrypt(self, blocks, keys):
        self.check_keys(keys)
        return [self.decrypt_block(block, keys) for block in blocks]
