import math

from z3 import And, Bool, BitVec, Extract, If, Int, Optimize, Or, Sum, sat

from lincrypt.lat import build_lat

"""

Der Zweck dieses Programmes ist das Finden guter linearer Approximationen
(alpha, gamma) für den Angriff auf die letzte Runde. Dazu wird der Z3 Solver
verwendet, welcher über rounds - 1 S-Box-Schichten die Maskenfolge mit dem
grössten Bias nach dem Piling-Up-Lemma sucht. Die Wahl der Masken bleibt
Sache des Aufrufers, der Searcher ist nur ein Hilfsmittel dazu.

"""

ATTACKED_NIBBLES = (3, 1)

COST_SCALE = 1000


def _cost(bias):
    """
    Kosten einer aktiven S-Box: -log2(|LAT| / 8), skaliert auf ganze Zahlen.
    Die Summe der Kosten entspricht -log2(2 * |Gesamtbias|).
    """
    return int(round(-math.log2(abs(int(bias)) / 8) * COST_SCALE))


def piling_up_bias(biases):
    """
    Gesamtbias nach dem Piling-Up-Lemma aus den LAT-Einträgen der
    aktiven S-Boxen: 2^(k-1) * prod(LAT / 16).
    """
    total = 2 ** (len(biases) - 1)
    for bias in biases:
        total *= bias / 16
    return total


class CharacteristicSearcher:
    """
    Diese Klasse modelliert num_rounds S-Box-Schichten des SPN als
    Optimierungsproblem für Z3. Pro Nibble und Runde muss das Paar aus
    Eingabe- und Ausgabemaske einen LAT-Eintrag ungleich Null haben,
    aufeinanderfolgende Runden werden über die P-Box verknüpft.

    Ergebnis sind Tripel (alpha, gamma, bias), wobei alpha die Maske auf
    dem Klartext und gamma die Maske auf dem Zustand vor der letzten
    S-Box-Schicht ist.
    """
    def __init__(self, spn, num_rounds: int = None, max_active_sboxes: int = None):
        """
        Initialisiert den CharacteristicSearcher.

        Args:
            spn: vorgegebene SPN-Instanz
            num_rounds: Anzahl S-Box-Schichten der Approximation, standardmässig spn.rounds - 1
            max_active_sboxes: optionales Limit für aktive S-Boxen
        """
        self.spn = spn
        self.num_rounds = num_rounds if num_rounds is not None else spn.rounds - 1
        assert self.num_rounds >= 1
        self.max_active_sboxes = max_active_sboxes

        self.lat = build_lat(spn.sbox)
        self.solver = Optimize()
        self._define_variables()
        self._add_constraints()

    def _define_variables(self):
        """
        in_masks: 16-Bit-Masken vor jeder S-Box-Schicht (in_masks[-1] = gamma).
        out_masks: 16-Bit-Masken nach jeder S-Box-Schicht.
        """
        self.in_masks = [BitVec(f"in_{r}", 16) for r in range(self.num_rounds + 1)]
        self.out_masks = [BitVec(f"out_{r}", 16) for r in range(self.num_rounds)]
        self.active_sboxes = []

    def _add_constraints(self):
        """
        Fügt die Relationen der S-Boxen gemäss LAT, die Permutation zwischen
        den Runden und den Ausschluss der Nullmaske hinzu. Optimiert wird die
        Summe der Kosten aller S-Boxen.
        """
        costs = []
        for r in range(self.num_rounds):
            for i in range(4):
                in_nib = Extract(i * 4 + 3, i * 4, self.in_masks[r])
                out_nib = Extract(i * 4 + 3, i * 4, self.out_masks[r])

                cost = Int(f"cost_r{r}_n{i}")
                options = [And(in_nib == 0, out_nib == 0, cost == 0)]
                for a in range(1, 16):
                    for b in range(1, 16):
                        if self.lat[a][b] != 0:
                            options.append(And(in_nib == a, out_nib == b, cost == _cost(self.lat[a][b])))
                self.solver.add(Or(*options))
                costs.append(cost)

                is_active = Bool(f"active_r{r}_n{i}")
                self.solver.add(is_active == (in_nib != 0))
                self.active_sboxes.append(is_active)

            for i in range(16):
                bit = Extract(i, i, self.out_masks[r])
                target = self.spn.pbox[i]
                self.solver.add(Extract(target, target, self.in_masks[r + 1]) == bit)

        if self.max_active_sboxes is not None:
            self.solver.add(Sum([If(b, 1, 0) for b in self.active_sboxes]) <= self.max_active_sboxes)

        self.solver.add(self.in_masks[0] != 0)
        self.solver.add(self.in_masks[-1] != 0)
        self.solver.minimize(Sum(costs))

    def add_mandatory_nibble(self, required_blocks: list):
        """
        Erzwingt, dass die angegebenen Nibbles (0-3) von gamma aktiv sind.
        """
        for i in required_blocks:
            self.solver.add(Extract(i * 4 + 3, i * 4, self.in_masks[-1]) != 0)

    def restrict_output_nibbles(self, allowed_blocks=ATTACKED_NIBBLES):
        """
        Erzwingt, dass gamma nur in den angegebenen Nibbles aktiv ist. Der
        Angriff auf die letzte Runde deckt nur die Nibbles 3 und 1 auf.
        """
        for i in range(4):
            if i not in allowed_blocks:
                self.solver.add(Extract(i * 4 + 3, i * 4, self.in_masks[-1]) == 0)

    def _trail_bias(self, model):
        biases = []
        for r in range(self.num_rounds):
            in_mask = model.evaluate(self.in_masks[r], model_completion=True).as_long()
            out_mask = model.evaluate(self.out_masks[r], model_completion=True).as_long()
            for i in range(4):
                a = (in_mask >> (i * 4)) & 0xF
                b = (out_mask >> (i * 4)) & 0xF
                if a:
                    biases.append(int(self.lat[a][b]))
        return piling_up_bias(biases)

    def search_best_characteristic(self, num_solutions=1, show_results=False):
        """
        Sucht bis zu num_solutions verschiedene Approximationen und gibt sie
        als Liste von Tripeln (alpha, gamma, bias) zurück. Bereits gefundene
        Paare (alpha, gamma) werden für die weitere Suche ausgeschlossen.

        Args:
            num_solutions: Anzahl gewünschter Approximationen
            show_results: optional können Zwischenergebnisse gezeigt werden
        """
        results = []

        for n in range(num_solutions):
            if self.solver.check() != sat:
                if show_results:
                    print("no valid approximation found for the given constraints")
                break

            model = self.solver.model()
            alpha = model.evaluate(self.in_masks[0], model_completion=True).as_long()
            gamma = model.evaluate(self.in_masks[-1], model_completion=True).as_long()
            bias = self._trail_bias(model)
            results.append((alpha, gamma, bias))

            self.solver.add(Or(self.in_masks[0] != alpha, self.in_masks[-1] != gamma))

            if show_results:
                print(f"[{n + 1}] alpha = {alpha:04X}, gamma = {gamma:04X}, bias ≈ {bias:.6f}")
                for r in range(self.num_rounds):
                    mask = model.evaluate(self.in_masks[r], model_completion=True).as_long()
                    active_bits = "".join(str((mask >> i) & 1) for i in reversed(range(16)))
                    print(f"  Round {r + 1}: {active_bits}")
                out_bits = "".join(str((gamma >> i) & 1) for i in reversed(range(16)))
                print(f"  Output:  {out_bits}")
                print()

        return results
