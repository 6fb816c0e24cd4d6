"""Reconcile contract interfaces against hand-written resolver implementations."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from pathlib import Path

from resolver_sync.errors import LoadError, TemplateRenderError
from resolver_sync.golang import (
    Field,
    FuncDecl,
    MethodSignature,
    TypeDecl,
    default_import_name,
    iter_named,
    render_type,
    translate_namespace,
)
from resolver_sync.reconcile.compare import fields_equal
from resolver_sync.reconcile.models import (
    MATCH,
    MISSING,
    RECEIVER_MISSING,
    SIGNATURE_DRIFT,
    SKIPPED,
    UNSUPPORTED,
    MethodDecision,
    ReconcileResult,
)
from resolver_sync.render import (
    GUARD_STATEMENT,
    ImportLine,
    NameTypePair,
    NamingRules,
    render_file_header,
    render_method_stub,
    render_receiver_type,
)
from resolver_sync.source import SourceFile, SourceModel

logger = logging.getLogger(__name__)

ContractMethods = tuple[tuple[str, MethodSignature], ...]


class Reconciler:
    """Walks every contract and decides match, patch or generate for each method.

    The implementation model is the only thing mutated: patched methods get
    span edits on their source file and an updated signature. New text is
    accumulated per destination file in ``ReconcileResult.pending``.

    Each implementation file refers to the contract package through its own
    import name. Comparisons and rewrites in a file use that name; new files
    use the configured qualifier, else the name most files already use.
    """

    def __init__(
        self,
        contracts: SourceModel,
        implementation: SourceModel,
        naming: NamingRules,
        *,
        contract_qualifier: str | None = None,
        contract_import_path: str | None = None,
    ) -> None:
        self._contracts = contracts
        self._impl = implementation
        self._naming = naming
        self._contract_import_path = contract_import_path or contracts.import_path
        self._file_qualifiers = self._contract_import_names()
        self._qualifier = contract_qualifier or self._common_qualifier() or contracts.package
        self._projected = frozenset({contracts.package, implementation.package, self._qualifier})
        self._contract_decls = self._collect_contracts()

    @property
    def projected_namespaces(self) -> frozenset[str]:
        return self._projected

    @property
    def qualifier(self) -> str:
        """Name new files use for the contract package."""
        return self._qualifier

    def contract_names(self) -> tuple[str, ...]:
        """Contracts in traversal order."""
        return tuple(decl.name for decl, _ in self._contract_decls)

    def reconcile(self) -> ReconcileResult:
        """Run one full pass over all contracts in lexicographic order."""
        result = ReconcileResult()
        emitted_receivers: set[str] = set()
        for decl, methods in self._contract_decls:
            receiver = self._naming.receiver_for_contract(decl.name)
            if not self._impl.has_type(receiver):
                if receiver not in emitted_receivers:
                    emitted_receivers.add(receiver)
                    self._generate_receiver(decl, receiver, result)
                continue
            for name, signature in methods:
                self._reconcile_method(decl, receiver, name, signature, result)
        return result

    def qualifier_for(self, path: Path) -> str:
        """Import name for the contract package inside ``path``."""
        return self._file_qualifiers.get(path, self._qualifier)

    def projected_for(self, path: Path) -> frozenset[str]:
        return self._projected | {self.qualifier_for(path)}

    def _contract_import_names(self) -> dict[Path, str]:
        names: dict[Path, str] = {}
        for path, source in self._impl.files.items():
            for spec in source.parsed.imports:
                if spec.name in {"_", "."} or not self._imports_contract(spec.path):
                    continue
                names[path] = spec.name
                break
        return names

    def _imports_contract(self, import_path: str) -> bool:
        if self._contract_import_path is not None:
            return import_path == self._contract_import_path
        return default_import_name(import_path) == self._contracts.package

    def _common_qualifier(self) -> str | None:
        counts = Counter(self._file_qualifiers.values())
        if not counts:
            return None
        return counts.most_common(1)[0][0]

    def _collect_contracts(self) -> list[tuple[TypeDecl, ContractMethods]]:
        selected: list[tuple[TypeDecl, ContractMethods]] = []
        for name in sorted(self._contracts.interfaces):
            decl = self._contracts.interfaces[name]
            if not self._naming.is_contract(name):
                continue
            methods: list[tuple[str, MethodSignature]] = []
            for method in decl.methods:
                if method.signature is None:
                    raise LoadError(
                        f"{name}.{method.name} uses {method.unsupported}",
                        path=str(self._contracts.file_map[name]),
                    )
                methods.append((method.name, method.signature))
            selected.append((decl, tuple(methods)))
        return selected

    def _reconcile_method(
        self,
        contract: TypeDecl,
        receiver: str,
        method: str,
        signature: MethodSignature,
        result: ReconcileResult,
    ) -> None:
        existing = self._impl.method(receiver, method)
        if existing is None:
            self._generate_method(contract, receiver, method, signature, result)
            return

        key = existing.key
        path = self._impl.file_map[key]
        current = existing.signature
        if current is None:
            logger.warning(
                "skipping %s in %s: signature not understood (%s)",
                key,
                path.name,
                existing.unsupported,
            )
            result.decisions.append(
                MethodDecision(
                    contract=contract.name,
                    receiver=receiver,
                    method=method,
                    state=UNSUPPORTED,
                    path=str(path),
                    detail=existing.unsupported,
                )
            )
            return

        if self._patch_signature(existing, current, signature, self._impl.files[path]):
            logger.info("patched signature of %s in %s", key, path.name)
            result.dirty.add(path)
            state = SIGNATURE_DRIFT
        else:
            state = MATCH
        result.decisions.append(
            MethodDecision(
                contract=contract.name,
                receiver=receiver,
                method=method,
                state=state,
                path=str(path),
            )
        )

    def _patch_signature(
        self,
        decl: FuncDecl,
        current: MethodSignature,
        contract_signature: MethodSignature,
        source: SourceFile,
    ) -> bool:
        """Rewrite drifted parameter/result lists in place; return True when anything changed."""
        projected = self.projected_for(source.path)
        qualifier = self.qualifier_for(source.path)
        params_dirty = not fields_equal(current.params, contract_signature.params, projected)
        results_dirty = not fields_equal(current.results, contract_signature.results, projected)
        if not params_dirty and not results_dirty:
            return False

        params = current.params
        results = current.result_fields()
        if params_dirty:
            params = self._translate_fields(contract_signature.params, qualifier)
            source.replace(decl.params_span, f"({self._render_field_list(params)})")
        if results_dirty:
            results = self._translate_fields(contract_signature.result_fields(), qualifier)
            rendered = self._render_results(results)
            source.replace(decl.results_span, f" {rendered}" if rendered else "")
        if decl.body_open is not None and not decl.starts_with_panic:
            source.insert(decl.body_open + 1, guard_insertion(source.text, decl.body_open))
            decl.starts_with_panic = True
        decl.signature = MethodSignature(params=params, results=results)
        return True

    def _generate_method(
        self,
        contract: TypeDecl,
        receiver: str,
        method: str,
        signature: MethodSignature,
        result: ReconcileResult,
    ) -> None:
        is_root = self._naming.is_root(receiver)
        path = self._impl.directory / self._naming.destination_file(receiver, method)
        blocked = self._unloaded_destination(path, result)
        if blocked is not None:
            self._record_skip(contract, receiver, method, path, blocked, result)
            return

        qualifier = self.qualifier_for(path)
        params = self._translate_fields(signature.params, qualifier)
        results = self._translate_fields(signature.result_fields(), qualifier)
        try:
            text = render_method_stub(
                receiver,
                method,
                self._pairs(params),
                self._pairs(results),
                is_root=is_root,
                child_receiver=self._naming.child_receiver(method) if is_root else None,
            )
            if self._is_new_file(path, result):
                text = self._file_header(contract, (*params, *results), qualifier) + text
        except TemplateRenderError as error:
            self._record_skip(contract, receiver, method, path, error.reason, result)
            return

        logger.info("generated %s.%s in %s", receiver, method, path.name)
        result.pending.append(path, text)
        result.dirty.add(path)
        result.decisions.append(
            MethodDecision(
                contract=contract.name,
                receiver=receiver,
                method=method,
                state=MISSING,
                path=str(path),
            )
        )

    def _generate_receiver(
        self, contract: TypeDecl, receiver: str, result: ReconcileResult
    ) -> None:
        path = self._impl.directory / self._naming.base_file
        blocked = self._unloaded_destination(path, result)
        if blocked is not None:
            self._record_skip(contract, receiver, None, path, blocked, result)
            return
        try:
            text = render_receiver_type(receiver, self._naming.root_receiver)
            if self._is_new_file(path, result):
                text = render_file_header(self._impl.package, ()) + text
        except TemplateRenderError as error:
            self._record_skip(contract, receiver, None, path, error.reason, result)
            return

        logger.info("generated receiver type %s in %s", receiver, path.name)
        result.pending.append(path, text)
        result.dirty.add(path)
        result.decisions.append(
            MethodDecision(
                contract=contract.name,
                receiver=receiver,
                method=None,
                state=RECEIVER_MISSING,
                path=str(path),
            )
        )

    def _record_skip(
        self,
        contract: TypeDecl,
        receiver: str,
        method: str | None,
        path: Path,
        reason: str,
        result: ReconcileResult,
    ) -> None:
        target = receiver if method is None else f"{receiver}.{method}"
        logger.error("skipping stub %s for %s: %s", target, path.name, reason)
        result.decisions.append(
            MethodDecision(
                contract=contract.name,
                receiver=receiver,
                method=method,
                state=SKIPPED,
                path=str(path),
                detail=reason,
            )
        )

    def _is_new_file(self, path: Path, result: ReconcileResult) -> bool:
        return path not in self._impl.files and path not in result.pending

    def _unloaded_destination(self, path: Path, result: ReconcileResult) -> str | None:
        """Return a reason when ``path`` exists on disk but was not loaded with the package."""
        if not self._is_new_file(path, result) or not path.exists():
            return None
        return f"{path.name} exists but is not part of the loaded package"

    def _translate_fields(self, fields: Sequence[Field], qualifier: str) -> tuple[Field, ...]:
        mapping = {self._contracts.package: qualifier}
        return tuple(
            Field(name=item.name, type=translate_namespace(item.type, mapping)) for item in fields
        )

    def _pairs(self, fields: Sequence[Field]) -> list[NameTypePair]:
        return [
            NameTypePair(name=item.name, type=render_type(item.type, self._impl.package))
            for item in fields
        ]

    def _render_field_list(self, fields: Sequence[Field]) -> str:
        named = bool(fields) and all(item.name for item in fields)
        rendered = []
        for item in fields:
            type_text = render_type(item.type, self._impl.package)
            rendered.append(f"{item.name} {type_text}" if named else type_text)
        return ", ".join(rendered)

    def _render_results(self, fields: Sequence[Field]) -> str:
        if not fields:
            return ""
        if len(fields) == 1 and not fields[0].name:
            return render_type(fields[0].type, self._impl.package)
        return f"({self._render_field_list(fields)})"

    def _file_header(
        self, contract: TypeDecl, fields: Sequence[Field], qualifier: str
    ) -> str:
        contract_imports = self._contracts.imports_for(contract.name)
        lines: dict[str, ImportLine] = {}
        for item in fields:
            for named in iter_named(item.type):
                namespace = named.namespace
                if namespace == self._impl.package or namespace in lines:
                    continue
                if namespace == qualifier:
                    import_path = self._contract_import_path
                else:
                    import_path = contract_imports.get(namespace)
                if import_path is None:
                    logger.warning(
                        "no import path known for package %r; leaving it to the formatter",
                        namespace,
                    )
                    continue
                alias = None if default_import_name(import_path) == namespace else namespace
                lines[namespace] = ImportLine(path=import_path, alias=alias)
        return render_file_header(self._impl.package, list(lines.values()))


def guard_insertion(text: str, body_open: int) -> str:
    """Return the text to insert after a body's opening brace to prepend the guard."""
    rest = text[body_open + 1 :].lstrip(" \t")
    if rest.startswith("\n") or rest.startswith("\r\n"):
        return f"\n\t{GUARD_STATEMENT}"
    return f"\n\t{GUARD_STATEMENT}\n\t"
