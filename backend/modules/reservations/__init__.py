"""Table reservation module: allocation, deposits, cancellation and administration."""
