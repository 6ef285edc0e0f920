import argparse
import dataclasses
import logging
import sys

from .config import DEFAULT_CONFIG
from .engine import Combat, find_minimal_boost
from .errors import CombatError

logger = logging.getLogger(__name__)

def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="cavern-combat",
        description="Goblin and elf cave combat simulator"
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log every round")
    sub = p.add_subparsers(dest="cmd")

    p1 = sub.add_parser("part1", help="Run combat to the end and report its outcome")
    p1.add_argument("map", help="Path to the map file")
    p1.add_argument("--show", action="store_true", help="Print the final map")

    p2 = sub.add_parser("part2", help="Find the smallest elf attack power that wins without losses")
    p2.add_argument("map", help="Path to the map file")
    p2.add_argument("--ceiling", type=int, default=DEFAULT_CONFIG.boost_ceiling,
                    help="Highest attack power to try")
    p2.add_argument("--show", action="store_true", help="Print the final map")

    args = p.parse_args(argv)
    if getattr(args, "cmd", None) is None:
        p.print_help()
        sys.exit(2)
    return args

def _read(path: str) -> str:
    logger.debug("Reading map from %s", path)
    with open(path, encoding="utf-8") as fh:
        return fh.read()

def part1(args: argparse.Namespace) -> None:
    combat = Combat.from_text(_read(args.map))
    result = combat.run()
    print(f"combat ended after {result.rounds} full rounds")
    print(f"{result.winner.name.lower()}s win with {result.hit_points} total hit points left")
    print(f"outcome: {result.outcome}")
    if args.show:
        print(combat.units.render())

def part2(args: argparse.Namespace) -> None:
    config = dataclasses.replace(DEFAULT_CONFIG, boost_ceiling=args.ceiling)
    found = find_minimal_boost(_read(args.map), config)
    result = found.result
    print(f"elves need attack power {found.attack_power}")
    print(f"combat ended after {result.rounds} full rounds with {result.hit_points} hit points left")
    print(f"outcome: {result.outcome}")
    if args.show:
        print("\n".join(f"{u.id} {u.pos.x},{u.pos.y} hp={u.hp}" for u in result.survivors))

def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        if args.cmd == "part1":
            part1(args)
        else:
            part2(args)
    except (CombatError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
