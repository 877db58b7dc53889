import os

LEGACY_MODULES = frozenset(
    {
        "gatsby-image",
        "gatsby-image/withIEPolyfill",
        "gatsby-plugin-image/compat",
    }
)

NEW_MODULE = "gatsby-plugin-image"
NEW_COMPONENT = "GatsbyImage"
IMAGE_ATTRIBUTE = "image"
IMAGE_DATA_FIELD = "gatsbyImageData"
SHARP_FIELD = "childImageSharp"

# Legacy sizing props on the component, and the matching query fields.
SIZE_PROPS = ("fixed", "fluid")

QUERY_TAG = "graphql"

PRESENTATION_SIZE_FRAGMENT = "GatsbyImageSharpFluidLimitPresentationSize"

LEGACY_FRAGMENTS = frozenset(
    {
        "GatsbyImageSharpFixed",
        "GatsbyImageSharpFixed_withWebp",
        "GatsbyImageSharpFluid",
        "GatsbyImageSharpFluid_withWebp",
    }
)

LEGACY_FRAGMENTS_NO_PLACEHOLDER = frozenset(
    {
        "GatsbyImageSharpFixed_noBase64",
        "GatsbyImageSharpFixed_withWebp_noBase64",
        "GatsbyImageSharpFluid_noBase64",
        "GatsbyImageSharpFluid_withWebp_noBase64",
    }
)

LEGACY_FRAGMENTS_TRACED_SVG = frozenset(
    {
        "GatsbyImageSharpFixed_tracedSVG",
        "GatsbyImageSharpFixed_withWebp_tracedSVG",
        "GatsbyImageSharpFluid_tracedSVG",
        "GatsbyImageSharpFluid_withWebp_tracedSVG",
    }
)

CODEMODS = ("gatsby-plugin-image",)

DEFAULT_EXTENSIONS = ("jsx", "js", "ts", "tsx")

# Vendored and generated output directories are never rewritten.
IGNORED_DIRECTORIES = frozenset({"node_modules", ".cache", "public"})


def get_log_level() -> str:
    return os.getenv("IMAGE_CODEMOD_LOG_LEVEL", "WARNING").upper()


def get_max_workers() -> int | None:
    value = os.getenv("IMAGE_CODEMOD_WORKERS")
    if not value:
        return None
    workers = int(value)
    if workers < 1:
        raise ValueError(f"IMAGE_CODEMOD_WORKERS must be a positive integer, got {value!r}")
    return workers
