import time
from lincrypt.cryptanalysis import Cryptanalysis, recover_full_key, top_k
from lincrypt.framework import FrameworkProvider
from spn16.keys import generate_keys
from spn16.spn import SPN
from multiprocessing import Pool, cpu_count
import matplotlib.pyplot as plt
import numpy as np


class SuccessVsSamples:
    """
    Misst die Erfolgsrate des Angriffs in Abhängigkeit der Anzahl Textpaare,
    jeweils für den besten Teilschlüssel-Kandidaten und für den vollständigen
    Hauptschlüssel (top-K Kandidaten plus Verifikation).
    """
    def __init__(self, rounds=4, alpha=0x1010, gamma=0x2020, top=10):
        self.rounds = rounds
        self.alpha = alpha
        self.gamma = gamma
        self.top = top

    def _run_single_attack(self, num_samples):
        keys = generate_keys(self.rounds)
        spn = SPN(self.rounds)
        framework = FrameworkProvider(spn, keys)
        attack = Cryptanalysis(framework)

        start = time.time()
        best, counts = attack.find_partial_key(self.alpha, self.gamma, num_samples)
        partial_success = best == framework.target_partial_key()
        ranking = top_k(counts, self.top, num_pairs=len(attack.samples))
        found = recover_full_key(attack.samples, [guess for guess, _ in ranking], spn)
        end = time.time()
        return partial_success, keys[0] in found, end - start

    def analyse_success_rate(self, repeats, sample_steps):
        results_plot = {'samples': [], 'partial': [], 'full': [], 'avg_times': []}

        for i in sample_steps:
            with Pool(processes=cpu_count()) as pool:
                results = pool.map(self._run_single_attack, [i] * repeats)

            partial_rate = sum(1 for partial, _, _ in results if partial) / repeats * 100
            full_rate = sum(1 for _, full, _ in results if full) / repeats * 100
            avg_time = sum(duration for _, _, duration in results) / repeats

            print(f"Samples: {i}, partial: {partial_rate:.1f}%, full: {full_rate:.1f}%, time: {avg_time:.2f}s")

            results_plot['samples'].append(i)
            results_plot['partial'].append(partial_rate)
            results_plot['full'].append(full_rate)
            results_plot['avg_times'].append(avg_time)

        fig1, ax1 = plt.subplots(figsize=(10, 6))
        ax1.set_xlabel('Anzahl Textpaare')
        ax1.set_ylabel('Erfolgsrate (%)')
        ax1.scatter(results_plot['samples'], results_plot['partial'],
                    color='blue', label='Erfolgsrate (Teilschlüssel)', alpha=0.3)
        ax1.scatter(results_plot['samples'], results_plot['full'],
                    color='purple', label=f'Erfolgsrate (Hauptschlüssel, top {self.top})', alpha=0.3)
        ax1.grid(True)
        ax1.legend(loc='upper left')
        plt.title('Erfolgsrate in Abhängigkeit der Anzahl Textpaare')
        plt.tight_layout()
        plt.savefig("samples_1.png", dpi=300)
        plt.show()

        fig2, ax2 = plt.subplots(figsize=(10, 6))
        ax2.set_xlabel('Anzahl Textpaare')
        ax2.set_ylabel('Durchschnittliche Angriffszeit (s)')
        ax2.grid(True)

        x = np.array(results_plot['samples'])
        y = np.array(results_plot['avg_times'])
        ax2.scatter(x, y, color='red', alpha=0.3, label='Durchschnittliche Laufzeit')
        if len(x) > 1:
            trend = np.poly1d(np.polyfit(x, y, deg=1))
            ax2.plot(x, trend(x), color='darkred', linewidth=2.0, label='Trend')

        ax2.legend(loc='upper left')
        plt.title('Durchschnittliche Laufzeiten')
        plt.tight_layout()
        plt.savefig("time_1.png", dpi=300)
        plt.show()


def test_single_attack_uses_one_corpus(monkeypatch):
    calls = []
    generate = FrameworkProvider.generate_samples

    def counting(self, num_samples, seed=None):
        calls.append(num_samples)
        return generate(self, num_samples, seed=seed)

    monkeypatch.setattr(FrameworkProvider, "generate_samples", counting)
    partial, full, duration = SuccessVsSamples(top=256)._run_single_attack(500)
    assert calls == [500]
    assert full
    assert isinstance(partial, bool)
    assert duration >= 0


if __name__ == '__main__':
    experiment = SuccessVsSamples()
    experiment.analyse_success_rate(50, [250] + list(range(500, 5001, 500)) + list(range(6000, 12001, 2000)))
