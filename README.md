# pullpiri

Tools for two jobs on a vehicle service platform:

* **DDS type generation** – read simple IDL `struct` definitions and write
  typed source modules, a listener registry and a type-metadata table from
  them.
* **Action control** – take a scenario by name, look up its package in a
  key-value store, and start, stop or replace the package's workloads on
  the nodes that run them.

## Installation

```
pip install .
```

Tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## Generating DDS types

Run the generator from the project root:

```
pullpiri-dds-build
```

Options:

* `--manifest-dir` – component directory; the settings file is looked for
  at `src/settings.yaml` three directory levels above it. Defaults to the
  `CARGO_MANIFEST_DIR` environment variable, or the current directory.
* `--out-dir` – default output directory. Defaults to the `OUT_DIR`
  environment variable.
* `--cwd` – base directory that the configured IDL path is taken relative
  to. Defaults to the current directory.

The command reads the `dds` section of the settings file (`idl_path`,
`domain_id`, `out_dir`). When the file is absent, the IDL path
`src/vehicle/dds/idl`, domain id `0` and the default output directory are
used. An `out_dir` starting with `/` is used as given (and created if
needed); a relative one is replaced by the default output directory.

For every `.idl` file in the IDL directory a struct file `<name>.rs` is
written, along with `dds_modules.rs` and `dds_types.rs`, which index them.
If the IDL directory exists, `dds_type_registry.rs` and
`dds_type_metadata.rs` are written as well. A `dds_build_info.txt` summary
(IDL directory, output directory, domain id and the IDL files found) is
always written. When there are no IDL files, index files with no modules
are written; if module generation fails and the index files are missing,
`create_empty_modules` writes all four files with no types in them. The
command exits with status 1 and a message if the settings or output
directory cannot be used.

The same steps are available from Python:

```python
from pullpiri.build import run_build

out_dir = run_build(manifest_dir, build_out_dir, cwd)
```

The pieces can also be used one by one:

```python
from pullpiri.idl import parse_idl_file, collect_idl_files, get_idl_files
from pullpiri.idl_types import idl_to_rust_type
from pullpiri.generator import generate_dds_module, generate_type_registry

data = parse_idl_file("idl/VehicleSpeed.idl")   # a DdsData
print(data.name, data.fields)                   # struct name, {field: IDL type}

idl_to_rust_type("long")      # "i32"
idl_to_rust_type("double")    # "f64"
idl_to_rust_type("sequence")  # "String" for anything not recognised
```

`parse_idl_file` takes the name of the first `struct` in the file and the
`type name;` lines of the first braced block. `collect_idl_files` returns
the paths of the `.idl` files directly inside a directory, and
`get_idl_files` returns `(stem, path)` pairs; both return an empty list for
a missing directory.

`pullpiri.dds_settings.load_dds_settings(manifest_dir, build_out_dir)`
returns a `DdsSettings` value with the IDL directory, domain id and
optional output directory.

## Action control

`pullpiri.manager.ActionControllerManager` is given a `KeyValueStore`, a
`BusConnection`, the lists of nodes managed by the node controller
(`bluechi_nodes`) and by node agents (`nodeagent_nodes`), the host's name
and the directory where kube files are stored. `nodes_from_settings`
splits the `host` and `guest` entries of a settings mapping into those two
lists by their `type` (`bluechi` or `nodeagent`).

Its operations (all coroutines):

* `trigger_manager_action(scenario_name)` – loads `Scenario/<name>` and the
  package it targets (`Package/<target>`) from the store, then for every
  model of the package on a known node carries out the scenario's action:
  `launch` starts the model's `.service` unit, `terminate` stops it, and
  `update` or `rollback` stops it, replaces its kube link in the systemd
  directory, and starts it again. Other actions do nothing.
* `reconcile_do(scenario_name, current, desired)` – equal states need no
  work; `NONE`, `FAILED` and `UNKNOWN` cannot be reconciled from or to.
  Otherwise it loads `scenario/<name>` and `package/<target>` and, when the
  desired state is `RUNNING`, starts each model's unit.
* `start_workload`, `stop_workload`, `make_symlink_and_reload`,
  `delete_symlink_and_reload`, `reload_all_node` – the individual steps.

Failures raise `ManagerError` with a message naming what went wrong.

Unit operations go through `pullpiri.bluechi`: a `BluechiCmd` wraps a
`Command`, and `handle_bluechi_cmd` sends it over a `BusConnection`, using
`workload_run` for unit commands and `reload_all_nodes` for a controller
reload. Failures of these bus calls are logged, not raised.

`pullpiri.receiver.ActionControllerReceiver` is the request-facing layer.
`trigger_action` and `reconcile` answer with a `TriggerActionResponse` or
`ReconcileResponse` (status `0`) on success and raise `RpcError` carrying a
`GrpcCode` chosen from the failure otherwise. `pullpiri.status.i32_to_status`
turns the numeric state codes of requests into `Status` values; codes
outside 0–5 map to `Status.UNKNOWN`.

## What the package does not do

* It runs no network server: `ActionControllerReceiver` handles requests
  passed to it as Python calls, and nothing here listens on a port.
* It has no message-bus client and no key-value store client.
  `BusConnection`, `BusProxy` and `KeyValueStore` are interfaces; the caller
  supplies objects that implement them.
* Workloads on node-agent nodes are recognised but no command is sent to
  them; starting or stopping such a workload does nothing.