"""
harvest_forecaster.forecast — deterministic yield forecasting.

Modules:
  phenology  — ripeness stage to degree-day requirement mapping, cohorts.
  gdd        — growing-degree-day accumulation.
  projector  — daily ready-mass projection from cohorts.
  scheduler  — capacity-constrained FIFO harvest schedule.
  engine     — ``forecast()``: detection + controls → ForecastResult.
"""
