"""Defaults shared by the feature-set staging domain."""

PROPERTY_PREFIX = "FEATURESTAGE_"

DEFAULT_COPY_TYPES = "jar,war,rar"
DEFAULT_UNPACK_TYPES = "zip"
DEFAULT_INCLUDE_SCOPE = "compile"
DEFAULT_EXCLUDE_SCOPE = "test,system"
DEFAULT_STAGE_DIRNAME = "stage"

SCOPE_COMPILE = "compile"

# Maven artifact handlers: type -> (extension, classifier)
ARTIFACT_TYPES = {
    "jar": ("jar", ""),
    "war": ("war", ""),
    "rar": ("rar", ""),
    "ear": ("ear", ""),
    "ejb": ("jar", ""),
    "ejb-client": ("jar", "client"),
    "test-jar": ("jar", "tests"),
    "maven-plugin": ("jar", ""),
    "java-source": ("jar", "sources"),
    "javadoc": ("jar", "javadoc"),
    "bundle": ("jar", ""),
    "pom": ("pom", ""),
    "zip": ("zip", ""),
    "distribution-fragment": ("zip", ""),
    "glassfish-jar": ("jar", ""),
}
