"""Web-based recommendation graph visualization using pyvis."""

from pathlib import Path

from pyvis.network import Network

from .builder import RecommendationGraph

# Edge colors by rank
RANK_COLORS = {
    1: "#FFD93D",  # Yellow
    2: "#6BCB77",  # Green
    3: "#4ECDC4",  # Teal
}
POST_COLOR = "#FCE38A"
PLACEHOLDER_COLOR = "#888888"


def create_web_visualization(
    graph: RecommendationGraph,
    output_path: Path = Path("output/recommendations.html"),
    height: str = "900px",
    width: str = "100%",
    max_nodes: int | None = None,
) -> Path:
    """Create an interactive web visualization of the recommendations.

    Args:
        graph: RecommendationGraph instance
        output_path: Where to save the HTML file
        height: Height of the visualization
        width: Width of the visualization
        max_nodes: Limit number of nodes, keeping the most recommended

    Returns:
        Path to the generated HTML file
    """
    net = Network(
        height=height,
        width=width,
        bgcolor="#1a1a2e",
        font_color="white",
        directed=True,
        select_menu=True,
        cdn_resources="remote",
    )

    net.set_options("""
    {
        "physics": {
            "forceAtlas2Based": {
                "gravitationalConstant": -100,
                "centralGravity": 0.01,
                "springLength": 200,
                "springConstant": 0.02
            },
            "solver": "forceAtlas2Based",
            "stabilization": {
                "iterations": 100
            }
        },
        "edges": {
            "smooth": {
                "type": "continuous"
            }
        },
        "interaction": {
            "hover": true,
            "navigationButtons": true,
            "keyboard": true
        }
    }
    """)

    nodes_to_add = list(graph.graph.nodes(data=True))
    if max_nodes and len(nodes_to_add) > max_nodes:
        # Prioritize posts that are recommended most often
        nodes_to_add = sorted(
            nodes_to_add, key=lambda item: (-graph.graph.in_degree(item[0]), item[0])
        )[:max_nodes]
    node_ids = {n for n, _ in nodes_to_add}

    for node_id, data in nodes_to_add:
        title = data.get("title", node_id)
        recommended_by = graph.graph.in_degree(node_id)

        net.add_node(
            node_id,
            label=title[:30] + "..." if len(title) > 30 else title,
            title=f"<b>{title}</b><br>Recommended by: {recommended_by}",
            color=PLACEHOLDER_COLOR if data.get("placeholder") else POST_COLOR,
            size=10 + 3 * recommended_by,
        )

    for source, target, data in graph.graph.edges(data=True):
        if source not in node_ids or target not in node_ids:
            continue

        rank = data.get("rank", 0)
        net.add_edge(
            source,
            target,
            title=(
                f"#{rank} | title={data.get('title_proximity_score', 0.0):.3f}"
                f" | distance={data.get('vector_distance', 0.0):.3f}"
            ),
            color=RANK_COLORS.get(rank, PLACEHOLDER_COLOR),
            width=max(1, 4 - rank),
        )

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    net.save_graph(str(output_path))

    return output_path
