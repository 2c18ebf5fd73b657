from typing import Optional

from core.descriptors import DescriptorBuilder
from core.grpc_stubs import GrpcStubGenerator
from core.output import Output
from core.pipeline import FeatureToggleGenerator
from utils.logger import Logger
from config import settings

class Dependencies:
    """Dependency Injection Container."""

    def __init__(self):
        self._logger: Optional[Logger] = None
        self._descriptor_builder: Optional[DescriptorBuilder] = None
        self._generator: Optional[FeatureToggleGenerator] = None
        self._grpc_generator: Optional[GrpcStubGenerator] = None
        self._output: Optional[Output] = None

    @property
    def logger(self) -> Logger:
        if not self._logger:
            self._logger = Logger(debug_mode=settings.DEBUG_LOGGING, level=settings.LOG_LEVEL)
        return self._logger

    @property
    def descriptor_builder(self) -> DescriptorBuilder:
        if not self._descriptor_builder:
            self._descriptor_builder = DescriptorBuilder(
                logger=self.logger,
                default_package=settings.DEFAULT_PACKAGE
            )
        return self._descriptor_builder

    @property
    def generator(self) -> FeatureToggleGenerator:
        if not self._generator:
            self._generator = FeatureToggleGenerator(
                logger=self.logger,
                default_package=settings.DEFAULT_PACKAGE,
                workers=settings.GENERATION_WORKERS
            )
        return self._generator

    @property
    def grpc_generator(self) -> GrpcStubGenerator:
        if not self._grpc_generator:
            self._grpc_generator = GrpcStubGenerator(
                logger=self.logger,
                default_package=settings.DEFAULT_PACKAGE,
                client_module=settings.GRPC_CLIENT_MODULE,
                interface_suffix=settings.GRPC_INTERFACE_SUFFIX,
                client_suffix=settings.GRPC_CLIENT_SUFFIX
            )
        return self._grpc_generator

    @property
    def output(self) -> Output:
        if not self._output:
            self._output = Output(logger=self.logger)
        return self._output

dependencies = Dependencies()

def get_dependencies() -> Dependencies:
    return dependencies
