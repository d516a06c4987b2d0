"""Thread-pool building blocks: a work-stealing fork/join pool and chainable futures."""
