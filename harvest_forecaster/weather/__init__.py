"""
Weather layer — temperature series for growing-degree-day accumulation.

Submodules:
  climatology        — monthly mean temperature normals per district
  series             — pure resolution of one temperature per horizon day
  open_meteo_client  — live daily means from the Open-Meteo forecast API

The forecast engine only consumes ``series``; the live client is called at
the CLI boundary and its output passed in as plain data.
"""
