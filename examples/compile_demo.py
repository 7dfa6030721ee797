#!/usr/bin/env python3
"""
c0 Compiler Demo
================

This script demonstrates how to use the c0 SDK front end to:
1. Tokenize a source file
2. Compile it to stack machine instructions
3. Resolve labels to instruction indices
4. Report a compile error

Usage:
    source .venv/bin/activate
    python examples/compile_demo.py
"""

from pathlib import Path

from c0_sdk.frontend import (
    C0Compiler,
    CompileError,
    CompilerOptions,
    Tokenizer,
    format_listing,
    resolve_labels,
)


def main():
    source_path = Path(__file__).parent / "triangle.c0"
    source = source_path.read_text(encoding="utf-8")

    # ==========================================================================
    # 1. Tokenize
    # ==========================================================================
    tokens = list(Tokenizer(source, source_path.name).tokenize())
    print(f"{source_path.name}: {len(tokens)} tokens")
    for token in tokens[:6]:
        print(f"  {token!r}")

    # ==========================================================================
    # 2. Compile
    # ==========================================================================
    compiler = C0Compiler(CompilerOptions.from_env())
    result = compiler.compile_source(source, source_path.name)

    print(f"\nCompiled to {len(result.instructions)} instructions "
          f"using {result.slot_count} slots:")
    print(format_listing(result.instructions))

    # ==========================================================================
    # 3. Resolve labels
    # ==========================================================================
    # A back end replaces each label id with the index of its LABEL
    labels = resolve_labels(result.instructions)
    print("\nLabels:")
    for label, index in sorted(labels.items()):
        print(f"  L{label} -> {index}")

    user_functions = [f for f in result.functions if not f.is_builtin]
    for function in user_functions:
        print(f"  {function.name} (id {function.func_id}) starts at "
              f"{labels[function.entry_label]}")

    # ==========================================================================
    # 4. Errors
    # ==========================================================================
    try:
        compiler.compile_source("const limit: int = 5;\nlimit = 6;", "broken.c0")
    except CompileError as e:
        print(f"\n{e}")


if __name__ == "__main__":
    main()
