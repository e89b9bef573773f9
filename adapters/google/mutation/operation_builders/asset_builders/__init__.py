from adapters.google.mutation.operation_builders.asset_builders.extension_asset_builder import (  # noqa: F401
    ExtensionAssetBuilder,
)
from adapters.google.mutation.operation_builders.asset_builders.responsive_search_ad_builder import (  # noqa: F401
    ResponsiveSearchAdBuilder,
)
from adapters.google.mutation.operation_builders.asset_builders.sitelink_operation_builder import (  # noqa: F401
    SitelinkOperationBuilder,
)

__all__ = ["ExtensionAssetBuilder", "ResponsiveSearchAdBuilder", "SitelinkOperationBuilder"]
