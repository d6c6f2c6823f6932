"""
Error handling utilities for the scenario compiler.
"""


class ScenarioCompileError(Exception):
    """Base exception for scenario compilation errors with line numbers and hints."""
    def __init__(self, message, line_number=None, column=None, context=None, suggestion=None):
        self.message = message
        self.line_number = line_number
        self.column = column
        self.context = context  # The offending text
        self.suggestion = suggestion  # How to fix it
        super().__init__(self._format_error())

    def _format_error(self):
        """Format the error message with context and suggestion."""
        lines = [f"{self.kind}"]
        if self.line_number:
            lines.append(f" at line {self.line_number}")
            if self.column:
                lines.append(f", column {self.column}")
        lines.append(f": {self.message}")

        if self.context:
            lines.append(f"\n   > {self.context}")

        if self.suggestion:
            lines.append(f"\n   hint: {self.suggestion}")

        return "".join(lines)

    @property
    def kind(self):
        return type(self).__name__


class UnknownClassReference(ScenarioCompileError):
    """A Given binding or a property type names an undeclared class or enum."""


class UnresolvedReferenceError(ScenarioCompileError):
    """An expression references a variable, property or check that does not exist."""


class UnknownBindingError(UnresolvedReferenceError):
    """A call names a variable that is absent from the Given binding table."""


class UnsupportedEffectError(ScenarioCompileError):
    """A method effect matches neither the assignment nor the raw-splice form."""


class UnsupportedCallError(ScenarioCompileError):
    """A Then effect matches none of the accepted step-level forms."""


class UnbalancedBlockError(ScenarioCompileError):
    """A notation block opens a brace that never closes (or closes one never opened)."""


class MissingBlockError(ScenarioCompileError):
    """A required notation block is absent."""


class NotationSyntaxError(ScenarioCompileError):
    """The notation text does not match the grammar."""


class ScenarioDecodeError(ScenarioCompileError):
    """A structured (JSON) document could not be decoded into a scenario."""


class ScenarioValidationError(ScenarioCompileError):
    """The scenario model violates one of its invariants."""


def get_line_context(source_code, line_number):
    """Extract the line of code from source by line number (1-based)."""
    if not source_code or line_number is None:
        return None
    source_lines = source_code.split('\n')
    if 0 < line_number <= len(source_lines):
        return source_lines[line_number - 1].strip()
    return None


def line_of_offset(source_code, offset):
    """Return the 1-based line number of a character offset."""
    return source_code.count('\n', 0, offset) + 1
