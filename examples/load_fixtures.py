"""Load data fixtures in dependency order.

Each fixture declares the fixtures whose rows it references. The sorter
returns the fixture objects so that referenced rows are loaded first.
"""

from dataclasses import dataclass, field

import depsort


@dataclass
class Fixture:
    name: str
    dependencies: list[str] = field(default_factory=list)

    def load(self) -> None:
        print(f"Loading {self.name}")


fixtures = [
    Fixture("orders", ["customers", "products"]),
    Fixture("customers", ["addresses"]),
    Fixture("products"),
    Fixture("addresses"),
]

sorter: depsort.TopologicalSorter[str, Fixture] = depsort.TopologicalSorter(allow_cycles=False)

for fixture in fixtures:
    sorter.add_node(fixture.name, fixture)

for fixture in fixtures:
    for dependency in fixture.dependencies:
        sorter.add_dependency(fixture.name, dependency)

if __name__ == "__main__":
    for fixture in sorter.sort():
        fixture.load()
