from multiprocessing import Pool

import numpy as np

from lincrypt.lat import parity
from lincrypt.searcher import ATTACKED_NIBBLES, CharacteristicSearcher
from spn16.keys import expand_key, master_key_from_round_key
from spn16.spn import SPN
from spn16.tables import DEFAULT_TABLES

"""

Dieses Modul implementiert die lineare Kryptanalyse des 16-Bit SPN in zwei Schritten.
Zuerst werden mit einer Approximation (alpha, gamma) alle 256 Kandidaten für die
Nibbles 3 und 1 des letzten Rundenschlüssels bewertet, danach werden für die besten
Kandidaten die Nibbles 2 und 0 per Brute Force ergänzt und der vollständige Schlüssel
durch exakte Entschlüsselung der ersten Textpaare verifiziert.

"""

NUM_CANDIDATES = 256
DEFAULT_CHECK_PAIRS = 30


def partial_key(guess):
    """
    Setzt die Nibbles eines 8-Bit Kandidaten an die Stellen 3 (oberes
    Halbbyte) und 1 (unteres Halbbyte) eines 16-Bit Schlüssels.
    """
    high, low = ATTACKED_NIBBLES
    return ((guess >> 4) & 0xF) << (high * 4) | (guess & 0xF) << (low * 4)


def _inv_substitute_array(values, inv_sbox):
    table = np.asarray(inv_sbox, dtype=np.int64)
    return (table[(values >> 12) & 0xF] << 12 |
            table[(values >> 8) & 0xF] << 8 |
            table[(values >> 4) & 0xF] << 4 |
            table[values & 0xF])


def partially_decrypt(ciphertexts, guess, inv_sbox=DEFAULT_TABLES.inv_sbox):
    """
    Macht das letzte Key Mixing mit dem Teilschlüssel und die letzte
    Substitution rückgängig und gibt den Zustand U vor der letzten
    S-Box-Schicht zurück (elementweise für ein numpy Array).
    """
    return _inv_substitute_array(ciphertexts ^ partial_key(guess), inv_sbox)


def _corpus_arrays(corpus):
    data = np.array(corpus, dtype=np.int64).reshape(-1, 2)
    return data[:, 0], data[:, 1]


def _count_matches(args):
    """
    Zählt für jeden Kandidaten des Blocks die Textpaare, bei denen die
    Parität von alpha & P mit der Parität von gamma & U übereinstimmt.
    """
    guesses, left, ciphertexts, gamma, inv_sbox = args
    counts = []
    for guess in guesses:
        right = parity(partially_decrypt(ciphertexts, guess, inv_sbox) & gamma)
        counts.append(int(np.count_nonzero(left == right)))
    return counts


def best_candidate(counts, num_pairs):
    """
    Wählt den Kandidaten mit der grössten Abweichung |count - N/2|.
    Bei Gleichstand gewinnt der kleinste Kandidat.
    """
    best_guess = 0
    best_dev = 0
    for guess, count in enumerate(counts):
        dev = abs(2 * count - num_pairs)
        if dev > best_dev:
            best_dev = dev
            best_guess = guess
    return best_guess


def recover_partial_key(corpus, alpha, gamma, tables=DEFAULT_TABLES, processes=None):
    """
    Bewertet alle 256 Kandidaten für die Nibbles 3 und 1 des letzten
    Rundenschlüssels. Die Kandidaten sind voneinander unabhängig, daher
    können sie optional auf mehrere Prozesse verteilt werden, ohne dass
    sich das Ergebnis ändert.

    Zurückgegeben werden der beste Kandidat und die Liste der 256 Zählwerte.

    Args:
        corpus: Liste von Textpaaren (Klartext, Geheimtext) unter einem festen Schlüssel
        alpha: Maske auf dem Klartext
        gamma: Maske auf dem Zustand vor der letzten S-Box-Schicht
        tables: Tables-Objekt des angegriffenen SPN
        processes: optionale Anzahl Prozesse
    """
    plaintexts, ciphertexts = _corpus_arrays(corpus)
    left = parity(plaintexts & alpha)

    if processes and processes > 1:
        step = -(-NUM_CANDIDATES // processes)
        tasks = [(range(start, min(start + step, NUM_CANDIDATES)), left, ciphertexts, gamma, tables.inv_sbox)
                 for start in range(0, NUM_CANDIDATES, step)]
        with Pool(processes=processes) as pool:
            chunks = pool.map(_count_matches, tasks)
        counts = [count for chunk in chunks for count in chunk]
    else:
        counts = _count_matches((range(NUM_CANDIDATES), left, ciphertexts, gamma, tables.inv_sbox))

    return best_candidate(counts, len(plaintexts)), counts


def top_k(counts, k=10, num_pairs=None):
    """
    Rangliste der Kandidaten als Liste von Tupeln (Kandidat, Zählwert),
    absteigend nach Zählwert. Mit num_pairs wird stattdessen nach der
    Abweichung |count - N/2| sortiert, was auch Approximationen mit
    negativem Bias abdeckt. Gleichstand: kleinerer Kandidat zuerst.
    """
    ranked = list(enumerate(counts))
    if num_pairs is None:
        ranked.sort(key=lambda item: (-item[1], item[0]))
    else:
        ranked.sort(key=lambda item: (-abs(2 * item[1] - num_pairs), item[0]))
    return ranked[:k]


def recover_full_key(corpus, candidates, spn=None, check_pairs=DEFAULT_CHECK_PAIRS):
    """
    Ergänzt jeden Kandidaten um alle 256 Kombinationen der Nibbles 2 und 0
    zu einem vollständigen letzten Rundenschlüssel, rechnet diesen über die
    Rotation auf den Hauptschlüssel zurück und prüft, ob die ersten
    check_pairs Geheimtexte exakt zu ihren Klartexten entschlüsselt werden.

    Zurückgegeben werden alle Hauptschlüssel, welche die Prüfung bestehen.
    Eine leere Liste bedeutet, dass der Angriff mit diesen Kandidaten
    ergebnislos war, das gilt auch ohne Textpaare zur Prüfung. Ein zu
    kurzes Präfix kann falsche Schlüssel zulassen.

    Args:
        corpus: Liste von Textpaaren (Klartext, Geheimtext)
        candidates: 8-Bit Kandidaten, typischerweise aus top_k
        spn: angegriffene SPN-Instanz, standardmässig SPN mit 4 Runden
        check_pairs: Anzahl der zu prüfenden Textpaare
    """
    spn = spn if spn is not None else SPN()
    prefix = list(corpus[:max(check_pairs, 0)])
    if not prefix:
        return []

    found = []
    seen = set()
    for candidate in candidates:
        candidate = int(candidate) & 0xFF
        if candidate in seen:
            continue
        seen.add(candidate)

        for n2 in range(16):
            for n0 in range(16):
                last_key = partial_key(candidate) | n2 << 8 | n0
                master_key = master_key_from_round_key(last_key, spn.rounds)
                keys = expand_key(master_key, spn.rounds)

                if all(spn.decrypt_block(ct, keys) == pt for pt, ct in prefix):
                    found.append(master_key)
    return found


class Cryptanalysis:
    def __init__(self, framework):
        """
        Initialisiert die Kryptoanalyse und übernimmt das SPN
        des Frameworks für die Analyse.
        """
        self.framework = framework
        self.spn = framework.spn
        self.samples = []

    def find_characteristic(self, max_active_sboxes: int = None, show_results=False):
        """
        Sucht mit dem CharacteristicSearcher eine Approximation über
        rounds - 1 Runden, deren gamma genau die Nibbles 3 und 1 aktiviert.
        """
        searcher = CharacteristicSearcher(self.spn, max_active_sboxes=max_active_sboxes)
        searcher.restrict_output_nibbles(ATTACKED_NIBBLES)
        searcher.add_mandatory_nibble(list(ATTACKED_NIBBLES))
        found = searcher.search_best_characteristic(num_solutions=1, show_results=show_results)
        if not found:
            return None
        return found[0]

    def find_partial_key(self, alpha, gamma, num_samples, seed=None, processes=None, show_results=False):
        """
        Erzeugt num_samples Textpaare und führt den Angriff auf die Nibbles
        3 und 1 des letzten Rundenschlüssels durch.

        Args:
            alpha: Maske auf dem Klartext
            gamma: Maske auf dem Zustand vor der letzten S-Box-Schicht
            num_samples: Anzahl zu testender Textpaare
            seed: optionaler Seed für reproduzierbare Textpaare
            processes: optionale Anzahl Prozesse
            show_results: optionale Ausgabe der Zwischenresultate
        """
        self.samples = self.framework.generate_samples(num_samples, seed=seed)
        best, counts = recover_partial_key(self.samples, alpha, gamma, self.spn.tables, processes=processes)

        if show_results:
            key_bits = sorted(self.framework.get_target_partial_subkey(gamma), reverse=True)
            print(f"attacked key bits: {key_bits}")
            dev = abs(counts[best] - len(self.samples) / 2) / max(len(self.samples), 1)
            print(f"alpha: {alpha:04x}, gamma: {gamma:04x}, best guess: {best:02x} with bias: {dev:.6f}")
        return best, counts

    def find_master_key(self, alpha, gamma, num_samples, top=10, check_pairs=DEFAULT_CHECK_PAIRS,
                        seed=None, processes=None, show_results=False):
        """
        Kompletter Angriff: Teilschlüssel bestimmen, die top besten
        Kandidaten nach Abweichung auswählen und daraus per Brute Force
        den Hauptschlüssel rekonstruieren.

        Zurückgegeben wird die Liste der verifizierten Hauptschlüssel.
        """
        _, counts = self.find_partial_key(alpha, gamma, num_samples, seed=seed,
                                          processes=processes, show_results=show_results)
        ranking = top_k(counts, top, num_pairs=len(self.samples))

        if show_results:
            print("top candidates:")
            for guess, count in ranking:
                print(f"  {guess:02x} : {count}")

        found = recover_full_key(self.samples, [guess for guess, _ in ranking], self.spn, check_pairs)

        if show_results:
            print(f"recovered master keys: {[f'0x{key:04x}' for key in found]}")
        return found
