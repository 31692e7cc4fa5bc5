class WildPathError(Exception):
    # base exception for all application-specific errors.
    pass

class ConfigError(WildPathError):
    # errors related to configuration.
    pass

class DiscoveryError(WildPathError):
    # errors during path splitting or tree walking.
    pass

class PatternError(DiscoveryError):
    # a wildcard the glob compiler rejects.
    pass

class ResolutionError(DiscoveryError):
    # the base directory of a wildcard path cannot be resolved.
    pass

class BaseDirectoryNotFoundError(ResolutionError):
    # the base directory of a wildcard path does not exist.
    pass

class OutputError(WildPathError):
    # errors during output operations.
    pass
