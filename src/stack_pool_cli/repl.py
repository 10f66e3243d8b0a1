import sys

from pool_core.config import PoolConfig
from pool_core.errors import (
    PoolConfigError,
    PoolCorruptError,
    PoolExhaustedError,
    PoolHandleError,
)
from stack_pool.arena import StackPool

_POOL_ERRORS = (
    PoolHandleError,
    PoolExhaustedError,
    PoolCorruptError,
    ValueError,
)

USAGE = (
    "new | push <value> <head> | pop <head> | free <head> | show <head> | "
    "depth <head> | cap | reserve <n> | stats | validate [heads...] | exit"
)


def _parse_value(token: str):
    try:
        return int(token)
    except ValueError:
        return token


def _arg(tokens, i, name):
    if len(tokens) <= i:
        raise ValueError(f"{tokens[0]}: missing <{name}>")
    return int(tokens[i])


def run_command(pool: StackPool, tokens):
    """Run one tokenized command and return the text to show."""
    cmd = tokens[0]
    if cmd == "new":
        return str(pool.new_stack())
    if cmd == "push":
        if len(tokens) < 3:
            raise ValueError("push: usage push <value> <head>")
        return str(pool.push(_parse_value(tokens[1]), int(tokens[2])))
    if cmd == "pop":
        return str(pool.pop(_arg(tokens, 1, "head")))
    if cmd == "free":
        return str(pool.free_stack(_arg(tokens, 1, "head")))
    if cmd == "show":
        return repr(pool.to_list(_arg(tokens, 1, "head")))
    if cmd == "depth":
        return str(pool.depth(_arg(tokens, 1, "head")))
    if cmd == "cap":
        return str(pool.capacity())
    if cmd == "reserve":
        pool.reserve(_arg(tokens, 1, "n"))
        return str(pool.capacity())
    if cmd == "stats":
        return (
            f"nodes={pool.node_count()} free={pool.free_count()} "
            f"live={pool.live_count()} capacity={pool.capacity()}"
        )
    if cmd == "validate":
        pool.validate(*(int(t) for t in tokens[1:]))
        return "ok"
    raise ValueError(f"unknown command {cmd!r} (try: {USAGE})")


def run_program_lines(lines, pool=None):
    if pool is None:
        pool = StackPool()
    for inp in lines:
        inp = inp.strip()
        if not inp or inp.startswith("#"):
            continue
        tokens = inp.split()
        try:
            out = run_command(pool, tokens)
        except _POOL_ERRORS as e:
            print(f"   └─ ERROR: {e}")
            continue
        print(f"   └─ {tokens[0]:<8}: {out}")
    return pool


def make_pool(capacity=0, handle_dtype="uint32", growth="double"):
    cfg = PoolConfig(handle_dtype=handle_dtype, growth=growth)
    return StackPool(capacity, cfg=cfg)


def repl(pool=None):
    if pool is None:
        pool = StackPool()
    print("\n📚 Stack Pool Shell")
    print(f"   Commands: {USAGE}")
    print("   Try: push 10 0, push 20 1, show 2")
    while True:
        try:
            inp = input("\nsp> ").strip()
        except (EOFError, KeyboardInterrupt):
            break
        if inp == "exit":
            break
        if not inp:
            continue
        run_program_lines([inp], pool)
    return pool


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    capacity = 0
    handle_dtype = "uint32"
    growth = "double"
    path = None
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--capacity" and i + 1 < len(args):
            capacity = int(args[i + 1])
            i += 2
            continue
        if arg.startswith("--capacity="):
            capacity = int(arg.split("=", 1)[1])
            i += 1
            continue
        if arg == "--handle-dtype" and i + 1 < len(args):
            handle_dtype = args[i + 1]
            i += 2
            continue
        if arg.startswith("--handle-dtype="):
            handle_dtype = arg.split("=", 1)[1]
            i += 1
            continue
        if arg == "--growth" and i + 1 < len(args):
            growth = args[i + 1]
            i += 2
            continue
        if arg.startswith("--growth="):
            growth = arg.split("=", 1)[1]
            i += 1
            continue
        if path is None:
            path = arg
            i += 1
            continue
        i += 1
    try:
        pool = make_pool(capacity, handle_dtype=handle_dtype, growth=growth)
    except (PoolConfigError, PoolExhaustedError) as e:
        print(f"stack-pool: {e}", file=sys.stderr)
        return 2
    if path:
        with open(path) as f:
            lines = f.readlines()
        run_program_lines(lines, pool)
    else:
        repl(pool)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
