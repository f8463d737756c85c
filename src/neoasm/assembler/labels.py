"""
Label Table and Backpatching
============================

Labels are resolved in two phases:

1. **Recording** (during the scan): each `@name` records the current image
   offset as the label's definition; each `;name` emits a 4-byte zero
   placeholder and records the placeholder's offset as a reference.

2. **Resolution** (after the scan): once the final image length is known,
   every placeholder is overwritten with the label's address, big-endian:

       address = ADDRESS_SPACE_SIZE - image_length + label_offset

A reference never resolves at its scan point, since later source may still
define the label, and the address depends on the total image length anyway.
"""

import difflib
import logging
import struct
from dataclasses import dataclass

from neoasm.cpu import resolved_address
from neoasm.errors import DuplicateSymbolError, SourceLocation, UndefinedSymbolError


logger = logging.getLogger(__name__)

# Placeholders hold a 32-bit big-endian address
ADDRESS_FORMAT = ">I"
ADDRESS_SIZE = struct.calcsize(ADDRESS_FORMAT)


@dataclass(frozen=True)
class LabelDefinition:
    """Where a label was defined: its image offset and source location."""
    name: str
    offset: int
    location: SourceLocation


@dataclass(frozen=True)
class LabelReference:
    """A placeholder awaiting a label's address."""
    name: str
    offset: int
    location: SourceLocation


class LabelResolver:
    """
    Label definitions and reference sites for a single assembly pass.

    A resolver belongs to one pass; it is filled while scanning and
    consulted once by resolve().
    """

    def __init__(self):
        self._definitions: dict[str, LabelDefinition] = {}
        self._references: dict[str, list[LabelReference]] = {}

    # =========================================================================
    # Recording
    # =========================================================================

    def define(self, name: str, offset: int, location: SourceLocation) -> None:
        """
        Record the definition of a label.

        Raises:
            DuplicateSymbolError: If the label is already defined
        """
        if name in self._definitions:
            raise DuplicateSymbolError(
                name,
                location=location,
                original_location=self._definitions[name].location,
            )

        self._definitions[name] = LabelDefinition(name, offset, location)
        logger.debug(f"Label '{name}' defined at offset {offset}")

    def add_reference(self, name: str, offset: int, location: SourceLocation) -> None:
        """Record a placeholder at offset that must receive the address of name."""
        self._references.setdefault(name, []).append(LabelReference(name, offset, location))

    @property
    def definitions(self) -> dict[str, int]:
        """Label name -> defining offset."""
        return {name: d.offset for name, d in self._definitions.items()}

    @property
    def references(self) -> dict[str, list[int]]:
        """Label name -> placeholder offsets, in emission order."""
        return {name: [r.offset for r in refs] for name, refs in self._references.items()}

    def undefined_references(self) -> list[LabelReference]:
        """References whose label is never defined, in emission order."""
        missing = [
            ref
            for name, refs in self._references.items()
            if name not in self._definitions
            for ref in refs
        ]
        return sorted(missing, key=lambda ref: ref.offset)

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve(self, buffer: bytearray, strict: bool = False) -> list[str]:
        """
        Patch every placeholder in buffer with its label's address.

        The buffer must be complete: addresses depend on its final length.

        Args:
            buffer: The assembled image, patched in place
            strict: If True, a reference to an undefined label is an error;
                    otherwise its placeholder stays zero

        Returns:
            Warning messages, one per label that is defined but never used

        Raises:
            UndefinedSymbolError: In strict mode, for the first reference to
                an undefined label
        """
        if strict:
            missing = self.undefined_references()
            if missing:
                first = missing[0]
                raise UndefinedSymbolError(
                    first.name,
                    location=first.location,
                    similar=_similar_names(first.name, self._definitions),
                )

        image_length = len(buffer)
        warnings = []

        for name, definition in self._definitions.items():
            refs = self._references.get(name)
            if not refs:
                message = f"{definition.location}: warning: label '{name}' is unused"
                logger.warning(message)
                warnings.append(message)
                continue

            address = resolved_address(definition.offset, image_length)
            for ref in refs:
                struct.pack_into(ADDRESS_FORMAT, buffer, ref.offset, address)

            logger.debug(f"Label '{name}' resolved to ${address:06X} at {len(refs)} site(s)")

        return warnings

    def addresses(self, image_length: int) -> dict[str, int]:
        """Label name -> resolved address for an image of image_length bytes."""
        return {
            name: resolved_address(d.offset, image_length)
            for name, d in self._definitions.items()
        }


def _similar_names(name: str, candidates) -> list[str]:
    return difflib.get_close_matches(name, sorted(candidates))
