import argparse
import sys

from lincrypt.cryptanalysis import DEFAULT_CHECK_PAIRS, Cryptanalysis
from lincrypt.framework import FrameworkProvider
from lincrypt.lat import build_lat, print_table, strongest_entries
from spn16.blocks import blocks_to_text, text_to_blocks
from spn16.errors import InvalidConfiguration, PaddingError, RandomSourceError
from spn16.keys import expand_key, generate_keys
from spn16.spn import SPN

"""

Demo der linearen Kryptanalyse: LAT ausgeben, Schlüssel erzeugen, Textpaare
verschlüsseln, Teilschlüssel und Hauptschlüssel zurückgewinnen und einen Text
mit dem gefundenen Schlüssel entschlüsseln.

"""


def _mask(value):
    try:
        mask = int(value, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid mask: {value!r}")
    if not 0 <= mask <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"mask must fit in 16 bits, got {value}")
    return mask


def build_parser():
    parser = argparse.ArgumentParser(description='Linear cryptanalysis of a toy 16-bit SPN')
    parser.add_argument('--rounds', type=int, default=4, help='Number of SPN rounds (>= 2)')
    parser.add_argument('--samples', type=int, default=10000, help='Number of known plaintext/ciphertext pairs')
    parser.add_argument('--alpha', type=_mask, default=0x1010, help='Input mask on the plaintext')
    parser.add_argument('--gamma', type=_mask, default=0x2020, help='Mask before the last S-box layer')
    parser.add_argument('--top', type=int, default=10, help='Number of partial key candidates to extend')
    parser.add_argument('--check-pairs', type=int, default=DEFAULT_CHECK_PAIRS,
                        help='Pairs used to verify a full key guess')
    parser.add_argument('--seed', type=int, default=None, help='Seed for the plaintext corpus')
    parser.add_argument('--processes', type=int, default=None, help='Processes for the candidate scan')
    parser.add_argument('--text', type=str, default='Secret message', help='Text for the demo decryption')
    parser.add_argument('--show-lat', action='store_true', help='Print the full LAT')
    parser.add_argument('--search', action='store_true', help='Choose alpha/gamma with the z3 trail searcher')
    return parser


def run(args):
    spn = SPN(args.rounds)
    lat = build_lat(spn.sbox)
    if args.show_lat:
        print("LAT:")
        print_table(lat)
        print()
    print("strongest LAT entries:", ", ".join(f"({a:x},{b:x}): {v:+d}" for a, b, v in strongest_entries(lat, 5)))

    keys = generate_keys(args.rounds)
    framework = FrameworkProvider(spn, keys)
    attack = Cryptanalysis(framework)
    print(f"real master key = 0x{keys[0]:04x}, last round key = 0x{keys[-1]:04x}")
    print(f"true partial key = 0x{framework.target_partial_key():02x}")

    alpha, gamma = args.alpha, args.gamma
    if args.search:
        found = attack.find_characteristic()
        if found is None:
            print("no approximation found, keeping the given masks")
        else:
            alpha, gamma, bias = found
            print(f"searcher: alpha = 0x{alpha:04x}, gamma = 0x{gamma:04x}, bias ≈ {bias:.6f}")

    found = attack.find_master_key(alpha, gamma, args.samples, top=args.top, check_pairs=args.check_pairs,
                                   seed=args.seed, processes=args.processes, show_results=True)
    if not found:
        print("attack inconclusive: no candidate passed verification")
        return 1

    test_blocks = text_to_blocks(args.text)
    encrypted = spn.encrypt(test_blocks, keys)
    decrypted = spn.decrypt(encrypted, expand_key(found[0], args.rounds))
    print()
    print(f"test plaintext  = {args.text!r}")
    print(f"encrypted       = {[f'{block:04x}' for block in encrypted]}")
    try:
        text = blocks_to_text(decrypted)
    except PaddingError:
        text = blocks_to_text(decrypted, unpad=False)
    print(f"decrypted       = {text!r}")
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        return run(args)
    except (InvalidConfiguration, RandomSourceError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
