"""
Scenario Notation Grammar.

This module contains the Lark grammar for the textual scenario notation.
"""

notation_grammar = r"""
    start: scenario

    scenario: "scenario" "(" text ")" "{" section* "}"
    ?section: domain_block | checks_block | steps_block

    // --- Domain ---
    domain_block: "domain" "{" (enum_def | class_def)* "}"
    enum_def: "enumType" "(" text ("," text)* ")"
    class_def: "klass" "(" text ")" "{" (prop_def | method_def)* "}"

    prop_def: "prop" "(" text "," text ("," prop_option)* ")"
    prop_option: "mutable" "=" BOOL -> mutable_option
               | "initial" "=" text -> initial_option

    method_def: "method" "(" text ("," param_def)* "," "effect" "=" text ")"
    param_def: "param" "(" text "," text ")"

    // --- Checks ---
    checks_block: "checks" "{" check_def* "}"
    check_def: "check" "(" text "," text ")"

    // --- Steps ---
    steps_block: "steps" "{" step* "}"
    ?step: given_step | when_step | then_step
    given_step: "given" "(" (binding ("," binding)*)? ")"
    binding: text "to" text
    when_step: "whenCond" "(" text? ")"
    then_step: "then" "(" text? ")"

    // --- Literals ---
    text: STRING | RAW_BLOCK

    // --- Terminals ---
    STRING: /"(?:[^"\\]|\\.)*"/
    RAW_BLOCK: /\[\[[\s\S]*?\]\]/
    BOOL: "true" | "false"

    COMMENT_1: /\/\/[^\n]*/
    COMMENT_2: /\#[^\n]*/
    BLOCK_COMMENT: /\/\*[\s\S]*?\*\//

    %import common.WS
    %ignore WS
    %ignore COMMENT_1
    %ignore COMMENT_2
    %ignore BLOCK_COMMENT
"""
