# Expression language: syntax tree, values, schemas and decoding.
