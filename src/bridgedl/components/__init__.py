# Built-in component implementations, discovered through @component.
