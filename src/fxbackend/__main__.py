# src/fxbackend/__main__.py
from fxbackend.app import main

main()
