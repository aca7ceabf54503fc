class PackagingError(Exception):
    """Base class for all errors raised while packaging a template."""


class InvalidTemplatePathError(PackagingError):
    """Raised if a nested stack/application does not reference an existing local template file."""

    def __init__(self, template_path: str):
        super().__init__(f"Invalid template path: {template_path}")
        self.template_path = template_path


class InvalidLocalPathError(PackagingError):
    """Raised if a resource property references a local file or folder that does not exist."""

    def __init__(self, resource_type: str, property_path: str, local_path: str):
        super().__init__(
            f"Parameter {property_path} of resource type {resource_type} refers to a file or "
            f"folder that does not exist: {local_path}"
        )
        self.resource_type = resource_type
        self.property_path = property_path
        self.local_path = local_path


class CircularNestedTemplateError(PackagingError):
    def __init__(self, template_path: str):
        super().__init__(f"Nested template {template_path} references itself, directly or through a cycle")
        self.template_path = template_path


class NestedTemplateDepthExceededError(PackagingError):
    def __init__(self, template_path: str, max_depth: int):
        super().__init__(
            f"Unable to export nested template {template_path}: maximum nesting depth of {max_depth} exceeded"
        )
        self.template_path = template_path
        self.max_depth = max_depth
