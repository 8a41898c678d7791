"""
predefined.py

Predefined Programs
-------------------

The fixed compiled templates of the synthetic-key protocol, keyed by name.

  DEFAULT_HIDDEN_PUZZLE  (=)  -- fails whenever it is run
  SYNTHETIC_MOD          (point_add 2 (pubkey_for_exp (sha256 2 5)))
  MOD                    standard "delegated puzzle or hidden puzzle" template
  P2_CONDITIONS          (c (q . 1) 2)  -- quotes its solution as conditions

Blobs are parsed once when a registry is built; a registry is read-only
afterwards and safe to share between threads.
"""

import threading
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from .errors import ConfigurationError, ParseError
from .program import Program


class ProgramName(Enum):
    DEFAULT_HIDDEN_PUZZLE = "DEFAULT_HIDDEN_PUZZLE"
    SYNTHETIC_MOD = "SYNTHETIC_MOD"
    MOD = "MOD"
    P2_CONDITIONS = "P2_CONDITIONS"


PREDEFINED_HEX: Dict[ProgramName, str] = {
    ProgramName.DEFAULT_HIDDEN_PUZZLE: "ff0980",
    ProgramName.SYNTHETIC_MOD: "ff1dff02ffff1effff0bff02ff05808080",
    ProgramName.MOD: (
        "ff02ffff01ff02ffff03ff0bffff01ff02ffff03ffff09ff05ffff1dff0bffff1effff0bff0bffff02ff06ffff04ff02ffff04ff17ff80"
        "80808080808080ffff01ff02ff17ff2f80ffff01ff088080ff0180ffff01ff04ffff04ff04ffff04ff05ffff04ffff02ff06ffff04ff02"
        "ffff04ff17ff80808080ff80808080ffff02ff17ff2f808080ff0180ffff04ffff01ff32ff02ffff03ffff07ff0580ffff01ff0bffff01"
        "02ffff02ff06ffff04ff02ffff04ff09ff80808080ffff02ff06ffff04ff02ffff04ff0dff8080808080ffff01ff0bffff0101ff058080"
        "ff0180ff018080"
    ),
    ProgramName.P2_CONDITIONS: "ff04ffff0101ff0280",
}

NameLike = Union[ProgramName, str]


class PredefinedPrograms:
    """
    Name -> Program registry.

        registry = PredefinedPrograms()
        registry[ProgramName.MOD].get_tree_hash()
        registry.get("SYNTHETIC_MOD")
    """

    def __init__(self, blobs: Optional[Mapping[ProgramName, str]] = None):
        blobs = PREDEFINED_HEX if blobs is None else blobs
        programs: Dict[ProgramName, Program] = {}
        for name, text in blobs.items():
            name = _resolve(name)
            try:
                programs[name] = Program.fromhex(text)
            except ParseError as e:
                raise ConfigurationError(f"predefined program {name.value} is malformed: {e.message}")
        self._programs = programs

    def get(self, name: NameLike) -> Program:
        key = _resolve(name)
        try:
            return self._programs[key]
        except KeyError:
            raise ConfigurationError(f"no predefined program named {key.value}")

    __getitem__ = get

    def __contains__(self, name) -> bool:
        try:
            return _resolve(name) in self._programs
        except ConfigurationError:
            return False

    def names(self):
        return list(self._programs)


def _resolve(name: NameLike) -> ProgramName:
    if isinstance(name, ProgramName):
        return name
    try:
        return ProgramName[str(name)]
    except KeyError:
        raise ConfigurationError(f"unknown predefined program name {name!r}")


_REGISTRY: Optional[PredefinedPrograms] = None
_REGISTRY_LOCK = threading.Lock()


def get_predefined_programs() -> PredefinedPrograms:
    """Process-wide registry, built by the first caller."""
    global _REGISTRY
    if _REGISTRY is None:
        with _REGISTRY_LOCK:
            if _REGISTRY is None:
                _REGISTRY = PredefinedPrograms()
    return _REGISTRY
