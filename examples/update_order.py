"""Resolve update orders for the simulation model.

Run with: python examples/update_order.py
"""

from pathlib import Path

import vardeps as vd

root = vd.load_scope_tree(Path(__file__).parent / "simulation.toml")
graph = vd.DependencyGraph.build(root)

session = vd.UpdateSession(graph)
session.add_independent(root.find("t"))
session.add_dependents([root.find("electrons.pressure"), root.find("ions.sound_speed")])

# Only the time-dependent chain is listed; ions.* do not depend on t.
for variable in session.get_ordered_update_list():
    print(variable.name)

# A change of the ion temperature needs a different, equally minimal list.
session.add_independent(root.find("ions.temperature"))
print([variable.name for variable in session.get_ordered_update_list()])
