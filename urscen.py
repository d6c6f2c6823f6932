import argparse
import os
import sys

from compiler import (
    FORMAT_JSON,
    FORMAT_NOTATION,
    compile_file,
    describe_source,
    load_scenario,
    read_source,
    set_verbose,
)
from urscenario.config import CONFIG_FILE, GeneratorConfig, dump_generator_config, load_generator_config
from urscenario.errors import ScenarioCompileError
from urscenario.json_codec import scenario_to_json
from urscenario.notation import print_notation


def log(message):
    """Log informational messages to stderr."""
    print(f"\033[92m\033[1mINFO:\033[0m {message}", file=sys.stderr)


def fail(message):
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def write_output(text, output=None):
    if output is None or output == "-":
        sys.stdout.write(text)
        return
    out_dir = os.path.dirname(output)
    if out_dir and not os.path.exists(out_dir):
        os.makedirs(out_dir)
    with open(output, 'w') as f:
        f.write(text)
    log(f"Wrote {output}")


def cmd_build(args):
    """Compile a scenario into robot script."""
    config = load_generator_config(args.config)
    script = compile_file(args.filename, fmt=args.format, config=config)
    write_output(script, args.output)


def cmd_fmt(args):
    """Print a scenario in notation form."""
    scn = load_scenario(args.filename, fmt=args.format)
    write_output(print_notation(scn), args.output)


def cmd_json(args):
    """Print a scenario as a JSON document."""
    scn = load_scenario(args.filename, fmt=args.format)
    write_output(scenario_to_json(scn) + "\n", args.output)


def cmd_describe(args):
    """List the procedures a notation file generates."""
    config = load_generator_config(args.config)
    for proc in describe_source(read_source(args.filename), config):
        params = ", ".join(f"{a['name']}: {a['type']}" for a in proc["args"])
        print(f"{proc['type']:<7} {proc['name']}({params})")


def cmd_init(args):
    if os.path.exists(CONFIG_FILE):
        fail(f"{CONFIG_FILE} already exists")
    with open(CONFIG_FILE, "w") as f:
        f.write(dump_generator_config(GeneratorConfig()) + "\n")
    log(f"Created {CONFIG_FILE}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Scenario to robot script compiler")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    parser.add_argument("--config", help=f"Generator config file (default: {CONFIG_FILE})")
    subparsers = parser.add_subparsers(dest="command")

    formats = [FORMAT_JSON, FORMAT_NOTATION]
    for name, help_text in (
        ("build", "Compile a scenario into robot script"),
        ("fmt", "Print a scenario in notation form"),
        ("json", "Print a scenario as JSON"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("filename")
        sub.add_argument("-o", "--output", help="Output file (default: stdout)")
        sub.add_argument("--format", choices=formats, help="Input format (default: from extension)")

    subparsers.add_parser("describe", help="List generated procedures").add_argument("filename")
    subparsers.add_parser("init", help="Write a default config file")

    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    commands = {
        "build": cmd_build,
        "fmt": cmd_fmt,
        "json": cmd_json,
        "describe": cmd_describe,
        "init": cmd_init,
    }
    if args.command not in commands:
        parser.print_help()
        return

    try:
        commands[args.command](args)
    except ScenarioCompileError as e:
        fail(f"Compilation Failed:\n{e}")


if __name__ == "__main__":
    main()
