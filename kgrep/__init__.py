"""
kgrep - grep for Kubernetes resources and container logs.

kgrep renders cluster resources as YAML, the same way `kubectl get -o yaml`
shows them, and reports every line containing a literal pattern together with
the resource it came from and its line number. It does the same for the logs
of the containers running in a namespace.

Key Features:
- Search pods, config maps, secrets and service accounts by content
- Search any resource kind, including custom resources, with case-insensitive
  kind resolution against the cluster's discovery API
- Search container logs across pods, filtered by pod name
- Stable, reproducible line numbers
- Optional HTTP JSON API

Example:
    Search config maps:
    ```bash
    kgrep configmaps --namespace prod --pattern db-host
    ```

    Search a custom resource:
    ```bash
    kgrep resources --kind certificate --api-version cert-manager.io/v1 -p example.com
    ```

    Search logs of every pod whose name contains "api":
    ```bash
    kgrep logs -n prod -r api -p ERROR --sort-by message
    ```
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
