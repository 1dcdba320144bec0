import importlib

mod = "jsonexplain"
class LazyLoader:
    """
    Lazy loader for the jsonexplain functions to speed up startup time.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, attr_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, attr_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Define the public names and their corresponding module paths
_mappings = {
    "SchemaData": (f"{mod}.schemadata", "SchemaData"),
    "SchemaObject": (f"{mod}.schemaobject", "SchemaObject"),
    "ValidationResult": (f"{mod}.validationresult", "ValidationResult"),
    "LinkResolver": (f"{mod}.referencelinks", "LinkResolver"),
    "ReferenceLink": (f"{mod}.referencelinks", "ReferenceLink"),
    "SchemaError": (f"{mod}.errors", "SchemaError"),
    "SchemaReferenceError": (f"{mod}.errors", "SchemaReferenceError"),
    "SchemaRecursionError": (f"{mod}.errors", "SchemaRecursionError"),
    "explain_json": (f"{mod}.explain", "explain_json"),
    "explain_file": (f"{mod}.explain", "explain_file"),
    "collect_features": (f"{mod}.explain", "collect_features"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
