"""Top‑level package for the Budget Planner.

The primary modules are:

* ``data_processing`` – ingestion and aggregation of expense records
* ``predictions`` – next-month expense predictions from spending patterns
* ``savings`` – personalised savings suggestions for the current month
* ``storage`` – JSON persistence of budgets and expenses
* ``visualization`` – functions that generate Plotly figures
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run budget_planner/dashboard.py
```

or ``python run_dashboard.py`` from the project root.  The dashboard is
not imported here so the engine can be used without starting Streamlit.
"""

from . import data_processing  # noqa: F401  # re-exported for convenience
from . import predictions  # noqa: F401  # re-exported for convenience
from . import savings  # noqa: F401  # re-exported for convenience
from . import storage  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience
from .predictions import predict  # noqa: F401
from .savings import advise  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "data_processing",
    "predictions",
    "savings",
    "storage",
    "visualization",
    "predict",
    "advise",
]
