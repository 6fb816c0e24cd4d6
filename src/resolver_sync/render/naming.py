"""Receiver naming and deterministic file placement."""

from __future__ import annotations

from dataclasses import dataclass


def lc_first(value: str) -> str:
    """Lower-case the first character."""
    if not value:
        return ""
    return value[0].lower() + value[1:]


def snake_case(value: str) -> str:
    """Insert ``_`` at every lowercase-to-non-lowercase transition and lower-case everything.

    Purely lexical: ``GetUserByID`` becomes ``get_user_by_id``.
    """
    pieces: list[str] = []
    previous_lower = False
    for char in value:
        current_lower = char.islower()
        if previous_lower and not current_lower:
            pieces.append("_")
        pieces.append(char.lower())
        previous_lower = current_lower
    return "".join(pieces)


def trim_suffix(value: str, suffix: str) -> str:
    if suffix and value.endswith(suffix):
        return value[: -len(suffix)]
    return value


_GOOS = frozenset(
    {
        "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios", "js",
        "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris", "wasip1", "windows", "zos",
    }
)
_GOARCH = frozenset(
    {
        "386", "amd64", "amd64p32", "arm", "armbe", "arm64", "arm64be", "loong64", "mips",
        "mipsle", "mips64", "mips64le", "mips64p32", "mips64p32le", "ppc", "ppc64", "ppc64le",
        "riscv", "riscv64", "s390", "s390x", "sparc", "sparc64", "wasm",
    }
)


def _is_reserved_stem(stem: str) -> bool:
    """True when the go tool would treat ``<stem>.go`` as a test or build-constrained file."""
    last = stem.rsplit("_", 1)[-1]
    return "_" in stem and (last == "test" or last in _GOOS or last in _GOARCH)


@dataclass(slots=True, frozen=True)
class NamingRules:
    """Maps contract names to receivers and receivers to destination files."""

    root_contract: str
    root_receiver: str
    suffix: str
    base_file: str

    def receiver_for_contract(self, contract_name: str) -> str:
        """``QueryResolver`` -> ``queryResolver``; the root contract maps to the root receiver."""
        if contract_name == self.root_contract:
            return self.root_receiver
        return lc_first(trim_suffix(contract_name, self.suffix)) + self.suffix

    def child_receiver(self, method_name: str) -> str:
        """Receiver a root method such as ``Query`` composes: ``queryResolver``."""
        return lc_first(method_name) + self.suffix

    def is_root(self, receiver: str) -> bool:
        return receiver == self.root_receiver

    def is_contract(self, interface_name: str) -> bool:
        if interface_name == self.root_contract:
            return True
        return bool(self.suffix) and interface_name.endswith(self.suffix)

    def destination_file(self, receiver: str, method_name: str) -> str:
        """Return the file name a new method stub belongs to."""
        if self.is_root(receiver):
            return self.base_file
        stem = f"{trim_suffix(receiver, self.suffix).lower()}_{snake_case(method_name)}"
        if _is_reserved_stem(stem):
            stem += "_impl"
        return f"{stem}.go"
