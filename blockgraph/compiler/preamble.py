"""
Preamble collector: the keyed import lines and helper function bodies that
generators request while a program is being emitted.
"""
from __future__ import annotations

import logging
from typing import Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import NameDB


logger = logging.getLogger(__name__)

# Stand-in for the helper's final name inside provide_function() bodies.
FUNCTION_NAME_PLACEHOLDER = "{%FUNCTION_NAME%}"

IMPORT_PREFIXES = ("from ", "import ")
DECLARATION_PREFIXES = ("def ", "# ")


class PreambleCollector:
    def __init__(self):
        self._definitions: Dict[str, str] = {}
        self._function_names: Dict[str, str] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def add_definition(self, key: str, text: str) -> None:
        if key in self._definitions and self._definitions[key] != text:
            logger.debug("Preamble: definition '%s' replaced", key)
        self._definitions[key] = text

    def provide_function(self, desired_name: str, lines: List[str], names: "NameDB") -> str:
        """
        Register a helper function once per pass and return the name it was
        given. ``lines`` refer to that name as FUNCTION_NAME_PLACEHOLDER.
        """
        if desired_name not in self._function_names:
            function_name = names.get_distinct_name(desired_name, "PROCEDURE")
            self._function_names[desired_name] = function_name
            code = "\n".join(lines).replace(FUNCTION_NAME_PLACEHOLDER, function_name)
            self._definitions[desired_name] = code
        return self._function_names[desired_name]

    def definitions(self) -> Dict[str, str]:
        return dict(self._definitions)

    def imports(self) -> List[str]:
        found = {d for d in self._definitions.values() if d.startswith(IMPORT_PREFIXES)}
        return sorted(found)

    def declarations(self) -> List[str]:
        return [d for d in self._definitions.values() if d.startswith(DECLARATION_PREFIXES)]

    def assemble(self, body: str) -> str:
        for key, text in self._definitions.items():
            if not text.startswith(IMPORT_PREFIXES + DECLARATION_PREFIXES):
                logger.debug("Preamble: dropping unclassified definition '%s'", key)
        return "\n".join(self.imports()) + "\n\n" + "\n".join(self.declarations()) + "\n\n" + body

    def clear(self) -> None:
        self._definitions.clear()
        self._function_names.clear()
