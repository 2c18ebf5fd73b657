"""
gRPC implementation generator.
Emits '<Interface>Impl' classes that forward annotated endpoints to a service
client and wrap every outcome in a Result.
"""
import ast
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple
from core import syntax as s
from core.collector import resolve_type
from core.declarations import GrpcInterfaceRecord, GrpcMethodRecord
from core.diagnostics import Diagnostic, NamingCollisionError
from core.generators import package_file
from core.ir import TypeKind, TypeRef
from core.naming import is_identifier, module_name, snake_case
from core.pipeline import GenerationResult
from core.syntax import SourceModule
from utils.logger import Logger

RESULT_MODULE = "grpc_result"
RESULT_CLASS = "Result"


def generate_result_module(package: str) -> SourceModule:
    """Shared 'Result' type: a value or the exception raised while producing it."""
    module = SourceModule(package_file(package, RESULT_MODULE))
    module.add_import("dataclasses", "dataclass")
    module.add_import("typing", "Generic", "Optional", "TypeVar")

    result_of_t = s.const("Result[T]")
    body: List[ast.stmt] = [
        s.docstring("Outcome of a remote call: a value or the exception that prevented it."),
        s.ann_assign("value", s.optional("T"), s.const(None)),
        s.ann_assign("error", s.optional("Exception"), s.const(None)),
        s.function_def(
            "success",
            [("cls", None), ("value", "T")],
            [s.returns(s.call("cls", keywords=[("value", s.name("value"))]))],
            returns_annotation=result_of_t,
            decorators=["classmethod"],
        ),
        s.function_def(
            "failure",
            [("cls", None), ("error", "Exception")],
            [s.returns(s.call("cls", keywords=[("error", s.name("error"))]))],
            returns_annotation=result_of_t,
            decorators=["classmethod"],
        ),
        s.function_def(
            "is_success",
            [("self", None)],
            [s.returns(s.is_none("self.error"))],
            returns_annotation="bool",
            decorators=["property"],
        ),
        s.function_def(
            "get_or_raise",
            [("self", None)],
            [
                s.if_then(s.is_none("self.error", negate=True), [s.raise_("self.error")]),
                s.returns(s.dotted("self.value")),
            ],
            returns_annotation="T",
        ),
    ]

    module.add(s.assign("T", s.call("TypeVar", [s.const("T")])))
    frozen = s.call("dataclass", keywords=[("frozen", s.const(True))])
    module.add(s.class_def(RESULT_CLASS, body, bases=[s.subscript("Generic", "T")], decorators=[frozen]))
    return module


class GrpcStubGenerator:
    """
    Generates gRPC implementations for a batch of annotated interfaces.

    Service clients are named after the interface unless a record names its
    own: 'OrderGrpc' -> 'OrderServiceClient', imported from the configured
    client module.
    """

    def __init__(
        self,
        logger: Logger,
        default_package: str = "feature_toggles",
        client_module: str = "grpc_clients",
        interface_suffix: str = "Grpc",
        client_suffix: str = "ServiceClient",
    ) -> None:
        self._logger = logger
        self._default_package = default_package
        self._client_module = client_module
        self._interface_suffix = interface_suffix
        self._client_suffix = client_suffix

    def guess_service_client(self, interface_name: str) -> str:
        base = interface_name
        if self._interface_suffix and base.endswith(self._interface_suffix) and base != self._interface_suffix:
            base = base[: -len(self._interface_suffix)]
        return f"{base}{self._client_suffix}"

    def generate(self, records: Iterable[GrpcInterfaceRecord]) -> GenerationResult:
        """
        Generate one implementation module per valid interface, plus one
        Result module per output package.

        Raises:
            NamingCollisionError: When two interfaces generate the same module
        """
        records = list(records)
        self._logger.log_info(f"Processing {len(records)} gRPC interfaces", "grpc")

        valid: List[Tuple[GrpcInterfaceRecord, str]] = []
        diagnostics: List[Diagnostic] = []
        for record in records:
            error = self._validate(record)
            if error:
                diagnostic = Diagnostic.error(error, record.interface_name)
                self._logger.log_diagnostic(diagnostic, "grpc")
                diagnostics.append(diagnostic)
                continue
            valid.append((record, record.package.strip() or self._default_package))

        if not valid:
            return GenerationResult(diagnostics=diagnostics)

        claims: Dict[str, List[str]] = defaultdict(list)
        for record, package in valid:
            claims[package_file(package, self._impl_module(record))].append(record.interface_name)
        collisions = [
            Diagnostic.error(f"Generated module '{path}' is claimed by {', '.join(owners)}", ", ".join(owners))
            for path, owners in claims.items()
            if len(owners) > 1
        ]
        if collisions:
            for collision in collisions:
                self._logger.log_diagnostic(collision, "grpc")
            raise NamingCollisionError(collisions)

        files = [self.generate_impl(record, package).to_file() for record, package in valid]
        packages = sorted({package for _, package in valid})
        files.extend(generate_result_module(package).to_file() for package in packages)
        files.sort(key=lambda generated: generated.path)

        self._logger.log_info(f"Generated {len(files)} gRPC files", "grpc", {"packages": packages})
        return GenerationResult(package=valid[0][1], files=files, diagnostics=diagnostics)

    def generate_impl(self, record: GrpcInterfaceRecord, package: str) -> SourceModule:
        interface = record.interface_name
        module = SourceModule(package_file(package, self._impl_module(record)))
        module.add_import(record.module, interface)
        module.add_import(RESULT_MODULE, RESULT_CLASS, level=1)

        client = self._service_client(record)
        self._import_type(module, client)

        body: List[ast.stmt] = [
            s.docstring(f"gRPC-backed implementation of {interface}."),
            s.function_def(
                "__init__",
                [("self", None), ("grpc_client", None)],
                [s.assign("self._client", s.call("grpc_client.create", [s.name(client.name)]))],
                returns_annotation=s.const(None),
            ),
        ]
        body.extend(self._endpoint(module, method) for method in record.methods)
        module.add(s.class_def(f"{interface}Impl", body, bases=[interface]))
        return module

    def _endpoint(self, module: SourceModule, method: GrpcMethodRecord) -> ast.stmt:
        request = resolve_type(method.request_type)
        response = resolve_type(method.response_type)
        self._import_type(module, request)
        self._import_type(module, response)

        call_method = s.call(s.attribute("self._client", method.method_name))
        execute = s.await_(s.call("call.execute", [s.call(request.name)]))
        return s.function_def(
            self._function_name(method),
            [("self", None)],
            [s.try_except(
                [
                    s.assign("call", call_method),
                    s.returns(s.call(f"{RESULT_CLASS}.success", [execute])),
                ],
                "Exception",
                "exc",
                [s.returns(s.call(f"{RESULT_CLASS}.failure", [s.name("exc")]))],
            )],
            returns_annotation=s.subscript(RESULT_CLASS, response.name),
            is_async=True,
        )

    def _validate(self, record: GrpcInterfaceRecord) -> Optional[str]:
        if not is_identifier(record.interface_name):
            return f"Interface name '{record.interface_name}' is not a valid identifier"
        if not _is_dotted(record.module):
            return f"Module '{record.module}' is not a valid Python module"
        package = record.package.strip()
        if package and not _is_dotted(package):
            return f"Package '{package}' is not a valid Python package"
        if record.service_client and not _is_dotted(record.service_client):
            return f"Service client '{record.service_client}' is not a valid name"

        seen = set()
        for method in record.methods:
            if not is_identifier(method.method_name):
                return f"Client method '{method.method_name}' is not a valid identifier"
            function_name = self._function_name(method)
            if not is_identifier(function_name):
                return f"Function name '{function_name}' is not a valid identifier"
            if function_name in seen:
                return f"Function '{function_name}' is declared more than once"
            seen.add(function_name)
            for type_name in (method.request_type, method.response_type):
                type_ref = resolve_type(type_name)
                if not _is_dotted(f"{type_ref.module}.{type_ref.name}" if type_ref.module else type_ref.name):
                    return f"'{type_name}' is not a usable message type"
        return None

    def _service_client(self, record: GrpcInterfaceRecord) -> TypeRef:
        if record.service_client:
            return resolve_type(record.service_client)
        return TypeRef(
            kind=TypeKind.OPAQUE,
            name=self.guess_service_client(record.interface_name),
            module=self._client_module or None,
        )

    @staticmethod
    def _import_type(module: SourceModule, type_ref: TypeRef) -> None:
        if type_ref.module:
            module.add_import(type_ref.module, type_ref.name)

    @staticmethod
    def _impl_module(record: GrpcInterfaceRecord) -> str:
        return module_name(f"{record.interface_name}Impl")

    @staticmethod
    def _function_name(method: GrpcMethodRecord) -> str:
        return method.function_name or snake_case(method.method_name)


def _is_dotted(name: str) -> bool:
    return bool(name) and all(is_identifier(part) for part in name.split("."))
