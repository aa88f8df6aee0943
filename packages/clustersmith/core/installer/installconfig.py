"""Install Config asset.

The only asset that takes user input. It prefers an ``install-config.yaml``
the user placed in the install directory and otherwise builds from the
document supplied on the resolution context. Either way the document is
schema-checked and run through the validators before anything consumes it.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError
import yaml

from clustersmith.core.assets.asset import AssetOutput, Parents
from clustersmith.core.assets.files import AssetFile, FileFetcher
from clustersmith.core.config.loader import parse_document
from clustersmith.core.engine.context import ResolutionContext
from clustersmith.core.errors import InvalidConfigError
from clustersmith.core.types import InstallConfig
from clustersmith.core.validation import (
    Validator,
    from_validation_error,
    validate_install_config,
)

logger = logging.getLogger(__name__)

INSTALL_CONFIG_FILENAME = "install-config.yaml"


class InstallConfigAsset:
    """Validated install config, materialized as ``install-config.yaml``."""

    kind = "install-config"
    name = "Install Config"
    dependencies: tuple[str, ...] = ()
    transient = False
    content_model = InstallConfig

    def __init__(self, platform_validators: dict[str, Validator] | None = None) -> None:
        self.platform_validators = platform_validators

    async def load(self, files: FileFetcher) -> AssetOutput | None:
        file = await files.fetch(INSTALL_CONFIG_FILENAME)
        if file is None:
            return None
        logger.info(f"Using user-provided {INSTALL_CONFIG_FILENAME}")
        document = parse_document(
            file.contents.decode("utf-8"), "yaml", source=INSTALL_CONFIG_FILENAME
        )
        return self._build(document, source=INSTALL_CONFIG_FILENAME)

    async def generate(self, parents: Parents, context: ResolutionContext) -> AssetOutput:
        if context.install_config is None:
            raise ValueError(
                f"no install config provided: write {INSTALL_CONFIG_FILENAME} "
                "to the install directory or pass --install-config"
            )
        return self._build(context.install_config, source=None)

    def _build(self, document: dict[str, Any], source: str | None) -> AssetOutput:
        try:
            install_config = InstallConfig.model_validate(document)
        except ValidationError as e:
            raise InvalidConfigError(from_validation_error(e), source) from e

        errors = validate_install_config(install_config, self.platform_validators)
        if errors:
            raise InvalidConfigError(errors, source)

        rendered = yaml.safe_dump(install_config.to_document(), sort_keys=False)
        return AssetOutput(
            payload=install_config,
            # Holds the pull secret
            files=(
                AssetFile(
                    path=INSTALL_CONFIG_FILENAME, contents=rendered.encode("utf-8"), mode=0o600
                ),
            ),
        )
