#!/usr/bin/env python3
"""
Command-line interface for pyjcf - Python Java Class File decoder.
"""

import argparse
import logging
import sys
from pathlib import Path

from .attributes import (
    CodeAttribute,
    ConstantValueAttribute,
    LineNumberTableAttribute,
    find_attribute,
)
from .classfile import flag_names, java_release
from .classreader import ClassFile, DecoderOptions, read_class_file
from .errors import DecodeError


def _options(args) -> DecoderOptions:
    return DecoderOptions(
        strict=args.strict,
        check_attribute_lengths=not args.lenient_lengths,
    )


def _fail(source_file: str, err: DecodeError):
    location = f" at offset {err.offset}" if err.offset is not None else ""
    print(f"Error decoding {source_file}: {err.kind}{location}: {err.message}", file=sys.stderr)
    sys.exit(1)


def _load(source_file: str, options: DecoderOptions) -> ClassFile:
    path = Path(source_file)
    if not path.exists():
        print(f"Error: File not found: {source_file}", file=sys.stderr)
        sys.exit(1)
    try:
        return read_class_file(path, options)
    except DecodeError as e:
        _fail(source_file, e)
    except OSError as e:
        print(f"Error reading {source_file}: {e}", file=sys.stderr)
        sys.exit(1)


def dump_command(args):
    """Decode class files and output the record tree as JSON."""
    options = _options(args)
    for source_file in args.files:
        class_file = _load(source_file, options)
        print(class_file.to_json())


def _format_flags(flags) -> str:
    return " ".join(name.lower() for name in flag_names(flags))


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


def _format_method_header(method, pool) -> str:
    name = method.name(pool)
    try:
        descriptor = method.method_descriptor(pool)
    except DecodeError:
        return f"{name}{method.descriptor(pool)}"
    params = ", ".join(str(p) for p in descriptor.parameter_types)
    return f"{descriptor.return_type} {name}({params})"


def _print_code(code: CodeAttribute, pool, indent: str = "    "):
    print(f"{indent}Code:")
    print(f"{indent}  stack={code.max_stack}, locals={code.max_locals}, length={code.code_length}")
    for instruction in code.code:
        operands = instruction.operand_text(pool)
        line = f"{instruction.offset:>6}: {instruction.mnemonic}"
        print(f"{indent}{line} {operands}".rstrip())
    if code.exception_table:
        print(f"{indent}  Exception table:")
        print(f"{indent}     from    to  target type")
        for entry in code.exception_table:
            catch = "any" if entry.catch_type == 0 else pool.class_name(entry.catch_type)
            print(f"{indent}    {entry.start_pc:>5} {entry.end_pc:>5} {entry.handler_pc:>7} {catch}")
    lines = find_attribute(code.attributes, LineNumberTableAttribute)
    if lines is not None:
        print(f"{indent}  LineNumberTable:")
        for entry in lines.line_number_table:
            print(f"{indent}    line {entry.line_number}: {entry.start_pc}")


def print_listing(class_file: ClassFile):
    """Print a javap-like listing of a decoded class file."""
    pool = class_file.constant_pool

    source = class_file.source_file()
    if source:
        print(f'Compiled from "{source}"')
    header = _join(_format_flags(class_file.access_flags), "class", class_file.this_class_name())
    super_name = class_file.super_class_name()
    if super_name:
        header += f" extends {super_name}"
    interfaces = class_file.interface_names()
    if interfaces:
        header += " implements " + ", ".join(interfaces)
    print(header)
    print(f"  minor version: {class_file.minor_version}")
    release = java_release(class_file.major_version)
    suffix = f" (Java {release})" if release else ""
    print(f"  major version: {class_file.major_version}{suffix}")
    print(f"  constant pool: {len(pool) - 1} slot(s)")
    print()

    for field in class_file.fields:
        print("  " + _join(_format_flags(field.access_flags), f"{field.name(pool)}: {field.descriptor(pool)}"))
        constant = find_attribute(field.attributes, ConstantValueAttribute)
        if constant is not None:
            print(f"    ConstantValue: {pool.describe(constant.constantvalue_index)}")

    for method in class_file.methods:
        print("  " + _join(_format_flags(method.access_flags), _format_method_header(method, pool)))
        if method.code is not None:
            _print_code(method.code, pool)
        exceptions = method.exceptions(pool)
        if exceptions:
            print(f"    throws {', '.join(exceptions)}")
        print()


def disasm_command(args):
    """Print a bytecode listing for class files."""
    options = _options(args)
    for source_file in args.files:
        class_file = _load(source_file, options)
        try:
            print_listing(class_file)
        except DecodeError as e:
            _fail(source_file, e)


def main(argv=None):
    """Main entry point for pyjcf CLI."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "files",
        nargs="+",
        help="Class files to decode",
    )
    common.add_argument(
        "--strict",
        action="store_true",
        help="Reject trailing bytes after the class file",
    )
    common.add_argument(
        "--lenient-lengths",
        action="store_true",
        help="Warn instead of failing when an attribute's declared length is wrong",
    )
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log decoding progress to stderr",
    )

    parser = argparse.ArgumentParser(
        prog="pyjcf",
        description="Python Java Class File decoder - decode and list Java class files",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    dump_parser = subparsers.add_parser(
        "dump",
        parents=[common],
        help="Decode class files and output the record tree as JSON",
    )
    dump_parser.set_defaults(func=dump_command)

    disasm_parser = subparsers.add_parser(
        "disasm",
        parents=[common],
        help="Print a javap-like listing with decoded instructions",
    )
    disasm_parser.set_defaults(func=disasm_command)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    args.func(args)


if __name__ == "__main__":
    main()
