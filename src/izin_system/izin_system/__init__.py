"""Izin System package.

Sick leave / home leave (izin sakit/pulang) workflow for a dormitory, organized
by feature modules (izin, santri, report, ...) with a thin Flask controller
layer on top of service/repository layers.
"""
