"""
pinime 命令行工具
"""

import argparse
import os
import sys
from typing import List, Optional, TextIO

import orjson

from pinime.engine.errors import DictionaryFormatError

SELECT_KEYS = range(1, 10)


def sanitize_input(text: str) -> str:
    """只保留 a-z 和 '，并转小写"""
    return ''.join(ch.lower() for ch in text if (ch.isascii() and ch.isalpha()) or ch == "'")


def _print_state(ui, out: TextIO):
    print(f"> {ui.preedit}", file=out)
    if ui.confirm_text:
        print(f"  confirmed: {ui.confirm_text} ({ui.confirm} / {ui.caret})", file=out)
    else:
        print(f"  confirmed: (0 / {ui.caret})", file=out)
    for n, c in enumerate(ui.candidate_list, 1):
        text = ui.confirm_text + c.text
        if c.comment:
            print(f"{n}. {text}\t({c.comment})", file=out)
        else:
            print(f"{n}. {text}", file=out)


def run_repl(session, stdin: TextIO = None, out: TextIO = None) -> List[str]:
    """
    按行交互：输入一行拼音后回车，再用 1-9 选词

    - 直接回车 = 选 1
    - 0 = 上屏原串
    - :q 退出

    Returns:
        本次会话所有上屏文本
    """
    from pinime.engine import InputEvent

    stdin = stdin or sys.stdin
    out = out or sys.stdout
    committed: List[str] = []

    print("pinime 全拼输入（:q 退出）", file=out)
    while True:
        print("pinyin> ", end="", file=out, flush=True)
        line = stdin.readline()
        if not line:
            break
        line = line.strip()
        if not line:
            continue
        if line in (':q', ':quit', ':exit'):
            break

        raw = sanitize_input(line)
        if not raw:
            print("(忽略：只接受 a-z 和 ')", file=out)
            continue

        session.handle(InputEvent.clear())
        for ch in raw:
            session.handle(InputEvent.char(ch))

        # 逐段选词：可能需要多次选择
        while True:
            ui = session.ui_state()
            _print_state(ui, out)

            if not ui.candidate_list:
                # 无候选：直接上屏原串
                committed.append(ui.raw_input)
                print(f"commit: {ui.raw_input}", file=out)
                session.handle(InputEvent.clear())
                break

            count = min(len(ui.candidate_list), max(SELECT_KEYS))
            print(f"select [1-{count}] (Enter=1, 0=raw)> ", end="", file=out, flush=True)
            sel_line = stdin.readline()
            if not sel_line:
                return committed
            sel = sel_line.strip()

            if sel == '0':
                committed.append(ui.raw_input)
                print(f"commit: {ui.raw_input}", file=out)
                session.handle(InputEvent.clear())
                break

            if not sel:
                index = 0
            elif sel.isdigit() and int(sel) in SELECT_KEYS:
                index = int(sel) - 1
            else:
                print("无效选择，请输入 1-9 / 0 / 直接回车", file=out)
                continue

            _, actions = session.handle(InputEvent.select(index))
            if actions:
                for action in actions:
                    committed.append(action.text)
                    print(f"commit: {action.text}", file=out)
                break

    return committed


def _build_engine(dict_path: Optional[str], limit: int):
    from pinime.engine import create_engine, EngineConfig
    return create_engine(EngineConfig(candidate_limit=limit), dict_path)


def main(argv: List[str] = None):
    """命令行入口"""
    parser = argparse.ArgumentParser(
        prog="pinime",
        description="pinime - 全拼输入法组合引擎",
    )

    subparsers = parser.add_subparsers(dest="command", help="可用命令")

    default_dict = os.getenv("PINIME_DICT")

    # repl 命令
    repl_parser = subparsers.add_parser("repl", help="交互式输入")
    repl_parser.add_argument("--dict", default=default_dict, help="词典路径 (.tsv / .json)")
    repl_parser.add_argument("-k", "--limit", type=int, default=9, help="候选数量 (2-9)")

    # query 命令
    query_parser = subparsers.add_parser("query", help="查询拼音")
    query_parser.add_argument("pinyin", help="拼音输入")
    query_parser.add_argument("--dict", default=default_dict, help="词典路径 (.tsv / .json)")
    query_parser.add_argument("-k", "--limit", type=int, default=9, help="候选数量 (2-9)")
    query_parser.add_argument("--json", action="store_true", help="以 JSON 输出 UI 快照")

    # server 命令
    server_parser = subparsers.add_parser("server", help="启动 API 服务")
    server_parser.add_argument("--host", default="0.0.0.0", help="绑定地址 (默认: 0.0.0.0)")
    server_parser.add_argument("--port", type=int, default=3000, help="端口 (默认: 3000)")

    # version 命令
    subparsers.add_parser("version", help="显示版本")

    args = parser.parse_args(argv)

    if args.command in ("repl", "query"):
        try:
            engine = _build_engine(args.dict, args.limit)
        except (OSError, DictionaryFormatError) as e:
            print(f"词典加载失败: {e}", file=sys.stderr)
            sys.exit(1)

        if args.command == "repl":
            from pinime.engine import Session
            run_repl(Session(engine))
        else:
            ui = engine.compose(sanitize_input(args.pinyin))
            if args.json:
                print(orjson.dumps(ui.to_dict(), option=orjson.OPT_INDENT_2).decode('utf-8'))
            else:
                print(f"> {ui.preedit}")
                for i, c in enumerate(ui.candidate_list, 1):
                    suffix = f"\t({c.comment})" if c.comment else ""
                    print(f"{i}. {c.text} [{c.weight}]{suffix}")

    elif args.command == "server":
        from pinime.api.server import main as server_main
        os.environ["HOST"] = args.host
        os.environ["PORT"] = str(args.port)
        server_main()

    elif args.command == "version":
        from pinime import __version__
        print(f"pinime v{__version__}")

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
