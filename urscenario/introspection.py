"""
Procedure introspection for scenario notation.

This module contains the ProcedureExtractor class that lists the script
procedures a notation file will produce, without generating any code.
"""

from lark import Transformer

from urscenario.notation import unquote, RAW_OPEN, RAW_CLOSE


class ProcedureExtractor(Transformer):
    """
    Extracts procedure signatures from a notation parse tree.

    Unlike NotationTransformer, which builds the full model, the extractor
    only keeps what shows up as a `def` in the generated script: class
    methods, checks and the entry procedure.
    """

    def __init__(self, check_prefix="check_", entry_name="program"):
        super().__init__()
        self.check_prefix = check_prefix
        self.entry_name = entry_name

    def start(self, items):
        """Flatten the scenario into a procedure list."""
        return items[0]

    def scenario(self, args):
        procedures = [p for section in args[1:] if section for p in section]
        procedures.append({"type": "entry", "name": self.entry_name, "args": []})
        return procedures

    def domain_block(self, args):
        return [p for cls in args if cls for p in cls]

    def class_def(self, args):
        """Prefix each method with its class name."""
        name, *members = args
        return [
            {"type": "method", "name": f"{name}_{m['name']}", "args": m["args"]}
            for m in members if m
        ]

    def method_def(self, args):
        name, *params, _effect = args
        return {"name": name, "args": params}

    def param_def(self, args):
        return {"name": args[0], "type": args[1]}

    def checks_block(self, args):
        return list(args)

    def check_def(self, args):
        return {"type": "check", "name": f"{self.check_prefix}{args[0]}", "args": []}

    def text(self, args):
        token = args[0]
        if token.type == "RAW_BLOCK":
            return str(token)[len(RAW_OPEN):-len(RAW_CLOSE)]
        return unquote(str(token))

    # Ignored nodes
    def enum_def(self, args):
        """Ignore enum definitions."""
        return None

    def prop_def(self, args):
        """Ignore property definitions."""
        return None

    def steps_block(self, args):
        """Ignore steps."""
        return None
