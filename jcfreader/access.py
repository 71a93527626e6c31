"""
Access and property flags shared by classes, fields and methods.
"""

from enum import IntFlag


class AccessFlags(IntFlag):
    PUBLIC = 0x0001
    PRIVATE = 0x0002
    PROTECTED = 0x0004
    STATIC = 0x0008
    FINAL = 0x0010
    SUPER = 0x0020  # For classes (invokespecial semantics)
    SYNCHRONIZED = 0x0020  # For methods
    VOLATILE = 0x0040
    BRIDGE = 0x0040
    TRANSIENT = 0x0080
    VARARGS = 0x0080
    NATIVE = 0x0100
    INTERFACE = 0x0200
    ABSTRACT = 0x0400
    STRICT = 0x0800
    SYNTHETIC = 0x1000
    ANNOTATION = 0x2000
    ENUM = 0x4000
    MODULE = 0x8000  # For classes
    MANDATED = 0x8000  # For method parameters


ACC_PUBLIC = 0x0001
ACC_PRIVATE = 0x0002
ACC_PROTECTED = 0x0004
ACC_STATIC = 0x0008
ACC_FINAL = 0x0010
ACC_SUPER = 0x0020
ACC_SYNCHRONIZED = 0x0020
ACC_VOLATILE = 0x0040
ACC_BRIDGE = 0x0040
ACC_TRANSIENT = 0x0080
ACC_VARARGS = 0x0080
ACC_NATIVE = 0x0100
ACC_INTERFACE = 0x0200
ACC_ABSTRACT = 0x0400
ACC_STRICT = 0x0800
ACC_SYNTHETIC = 0x1000
ACC_ANNOTATION = 0x2000
ACC_ENUM = 0x4000
ACC_MODULE = 0x8000
ACC_MANDATED = 0x8000


def is_set(flags: int, mask: int) -> bool:
    """Whether any bit of ``mask`` is set in ``flags``."""
    return (flags & mask) != 0


def _visibility(flags: int) -> list[str]:
    if flags & ACC_PUBLIC:
        return ["public"]
    if flags & ACC_PROTECTED:
        return ["protected"]
    if flags & ACC_PRIVATE:
        return ["private"]
    return []


def class_modifiers(flags: int) -> list[str]:
    """Java keywords for a class's flags, in source order.

    Interfaces are implicitly abstract, so ``abstract`` is left out for them.
    """
    mods = _visibility(flags)
    if flags & ACC_ABSTRACT and not flags & ACC_INTERFACE:
        mods.append("abstract")
    if flags & ACC_STATIC:
        mods.append("static")
    if flags & ACC_FINAL:
        mods.append("final")
    if flags & ACC_STRICT:
        mods.append("strictfp")
    return mods


def field_modifiers(flags: int) -> list[str]:
    """Java keywords for a field's flags, in source order."""
    mods = _visibility(flags)
    if flags & ACC_STATIC:
        mods.append("static")
    if flags & ACC_FINAL:
        mods.append("final")
    if flags & ACC_TRANSIENT:
        mods.append("transient")
    if flags & ACC_VOLATILE:
        mods.append("volatile")
    return mods


def method_modifiers(flags: int) -> list[str]:
    """Java keywords for a method's flags, in source order."""
    mods = _visibility(flags)
    if flags & ACC_ABSTRACT:
        mods.append("abstract")
    if flags & ACC_STATIC:
        mods.append("static")
    if flags & ACC_FINAL:
        mods.append("final")
    if flags & ACC_SYNCHRONIZED:
        mods.append("synchronized")
    if flags & ACC_NATIVE:
        mods.append("native")
    if flags & ACC_STRICT:
        mods.append("strictfp")
    return mods
