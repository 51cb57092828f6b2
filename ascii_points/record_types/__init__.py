"""
Record-type definitions sub-package for ascii-points.

Contains YAML files that define the field layout of each built-in
record type. The loader module (record_registry.py in the parent
package) reads these files at runtime.
"""
