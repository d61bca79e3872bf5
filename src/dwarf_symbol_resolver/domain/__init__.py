#!/usr/bin/env python3

"""Domain layer: models, extraction and resolution services."""
