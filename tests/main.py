from lincrypt.cryptanalysis import Cryptanalysis
from lincrypt.framework import FrameworkProvider
from spn16.keys import expand_key
from spn16.spn import SPN

"""

basic execution sample

"""


def basic_execution_sample():
    master_key = 0x1234
    rounds = 4
    num_samples = 10000

    spn = SPN(rounds)
    keys = expand_key(master_key, rounds)
    framework = FrameworkProvider(spn, keys)
    attack = Cryptanalysis(framework)

    found = attack.find_master_key(0x1010, 0x2020, num_samples, seed=1, show_results=True)
    print(f"true master key: 0x{master_key:04x}, recovered: {[f'0x{key:04x}' for key in found]}")


if __name__ == '__main__':
    basic_execution_sample()
