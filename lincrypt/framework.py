import random

from lincrypt.searcher import ATTACKED_NIBBLES

"""

Dieses Programm beinhaltet die Klasse FrameworkProvider, welche die nötigen
Informationen und Ressourcen für die spätere Kryptoanalyse bereitstellt.

"""


class FrameworkProvider:
    """
    Diese Klasse bietet Hilfsfunktionen für die Kryptanalyse des SPN.
    Sie erzeugt die Textpaare (Klartext, Geheimtext) unter einem festen
    Schlüsselplan und kennt den wahren Teilschlüssel, sodass der Erfolg
    eines Angriffs überprüft werden kann.
    """
    def __init__(self, spn, keys):
        """
        Initialisiert den FrameworkProvider.

        Args:
            spn: vorgegebene SPN-Instanz
            keys: Schlüsselplan mit spn.rounds + 1 Rundenschlüsseln
        """
        spn.check_keys(keys)
        self.spn = spn
        self.keys = list(keys)

    def get_target_partial_subkey(self, gamma: int):
        """
        Bestimmt die Bitstellen des letzten Rundenschlüssels, welche von
        den aktiven Nibbles der Ausgabemaske gamma betroffen sind.

        Args:
            gamma: Maske auf dem Zustand vor der letzten S-Box-Schicht
        """
        affected_key_bits = set()

        for sbox_index in range(4):
            if (gamma >> (sbox_index * 4)) & 0xF:
                for bit in range(4):
                    affected_key_bits.add(sbox_index * 4 + bit)
        return affected_key_bits

    def target_partial_key(self):
        """
        Gibt den wahren 8-Bit Kandidaten zurück: Nibble 3 des letzten
        Rundenschlüssels im oberen, Nibble 1 im unteren Halbbyte.
        """
        last_key = self.keys[self.spn.rounds]
        high, low = ATTACKED_NIBBLES
        return ((last_key >> (high * 4)) & 0xF) << 4 | ((last_key >> (low * 4)) & 0xF)

    def generate_samples(self, num_samples, seed=None):
        """
        Generiert die Textpaare für die Kryptoanalyse, indem zufällige
        16-Bit Klartexte mit dem SPN verschlüsselt werden. Mit seed ist
        der Korpus reproduzierbar.

        Die Textpaare werden als Liste von Tupeln zurückgegeben.

        Args:
            num_samples: Anzahl der zu generierenden Textpaare
            seed: optionaler Seed des Zufallsgenerators
        """
        rng = random.Random(seed)
        plaintexts = [rng.randint(0, 0xFFFF) for _ in range(num_samples)]
        ciphertexts = self.spn.encrypt(plaintexts, self.keys)
        return list(zip(plaintexts, ciphertexts))
