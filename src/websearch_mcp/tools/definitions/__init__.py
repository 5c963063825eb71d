# Adapter definitions package. Every module exposing an `adapter` AdapterSpec is discovered.
