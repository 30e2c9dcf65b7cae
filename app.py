"""
主程序：命令行打乱 / 求解 / 校验
状态记录用 YAML（JSON 也可直接读取）
"""
import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

import yaml

from cube_engine import (CubeError, CubeState, SolveError, deserialize, format_algorithm,
                         load_config, parse, scramble, serialize, solve_detailed, validate)
from cube_engine.core.moves import apply_algorithm
from cube_engine.solver_wrap import move_to_text

logger = logging.getLogger("cube_engine.app")


def load_state(args) -> CubeState:
    """Build the input state from --state, --facelets or --scramble."""
    if args.state:
        with open(args.state, 'r', encoding='utf-8') as f:
            record = yaml.safe_load(f)
        return deserialize(record)
    if args.facelets:
        return CubeState.from_facelet_string(args.facelets)
    state = CubeState.solved(args.size)
    if args.scramble:
        state = apply_algorithm(state, parse(args.scramble, args.size))
    return state


def cmd_scramble(args) -> int:
    result = scramble(args.size, args.moves, seed=args.seed)
    print(result.notation)
    if args.record:
        print(yaml.safe_dump(serialize(result.state), allow_unicode=True, sort_keys=False))
    return 0


def cmd_validate(args) -> int:
    state = load_state(args)
    reason = validate(state)
    if reason is None:
        print(f"✅ {state.size}x{state.size} 状态合法")
        return 0
    print(f"❌ 状态不合法: {reason}")
    return 1


def cmd_solve(args) -> int:
    state = load_state(args)
    config = load_config(args.config)
    overrides = {}
    if args.max_time_ms is not None:
        overrides['max_time_ms'] = args.max_time_ms
    if args.no_fallback:
        overrides['allow_fallback'] = False
    if overrides:
        config = replace(config, **overrides)
    try:
        solution = solve_detailed(state, config)
    except SolveError as e:
        print(f"❌ 求解失败: {e}")
        if e.partial:
            print(f"部分解: {format_algorithm(e.partial)}")
        return 1
    if args.steps:
        print(solution.summary())
    else:
        print(solution.notation)
    if args.explain:
        for i, move in enumerate(solution.algorithm.simplified(), 1):
            print(f"{i:3d}. {move}  {move_to_text(move)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cube-engine", description="NxN 魔方打乱与求解")
    parser.add_argument('-v', '--verbose', action='store_true', help="输出调试日志")
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('scramble', help="生成打乱")
    p.add_argument('-n', '--size', type=int, default=3)
    p.add_argument('-m', '--moves', type=int, default=None, help="步数（默认按阶数）")
    p.add_argument('--seed', type=int, default=None)
    p.add_argument('--record', action='store_true', help="同时输出打乱后的状态记录")
    p.set_defaults(func=cmd_scramble)

    for name, func, help_text in (('solve', cmd_solve, "求解"), ('validate', cmd_validate, "校验状态")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument('-n', '--size', type=int, default=3)
        source = p.add_mutually_exclusive_group()
        source.add_argument('--state', help="状态记录文件 (YAML/JSON)")
        source.add_argument('--facelets', help="URFDLB 状态串")
        source.add_argument('--scramble', help="从还原状态执行的打乱序列")
        p.set_defaults(func=func)

    solve_parser = sub.choices['solve']
    solve_parser.add_argument('--config', default=None, help="配置文件（默认 config.yaml）")
    solve_parser.add_argument('--max-time-ms', type=int, default=None)
    solve_parser.add_argument('--no-fallback', action='store_true', help="超时后不使用层先法")
    solve_parser.add_argument('--steps', action='store_true', help="按阶段输出")
    solve_parser.add_argument('--explain', action='store_true', help="逐步文字说明")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except (CubeError, OSError, yaml.YAMLError) as e:
        logger.debug("command failed", exc_info=True)
        print(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
