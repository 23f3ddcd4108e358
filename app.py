# app.py
import streamlit as st
import plotly.graph_objects as go

from editor import (
    FlowEditor, AddNode, SetNewNodeText, ConnectNodes, SelectNode, ClearSelection,
    UpdateSelectedText, DeleteSelected, SaveFlow, ResetFlow, DropNode
)

# Node box size in plot units (matches the desktop canvas)
NODE_W = 160.0
NODE_H = 48.0

st.set_page_config(page_title="Chatbot Flow Builder (Web)", layout="wide")

# Session state: one editor per browser session
if 'editor' not in st.session_state:
    ed = FlowEditor()
    # The plot is already in graph coordinates, so the projector is the identity
    ed.attachCanvas((0.0, 0.0), lambda p: p)
    st.session_state.editor = ed
    st.session_state.saved = None

editor: FlowEditor = st.session_state.editor


def _persist(nodes, edges):
    st.session_state.saved = {
        "nodes": [n.to_dict() for n in nodes],
        "edges": [e.to_dict() for e in edges],
    }


editor.persist = _persist
editor.notify = st.error

# UI
col_btns, col_plot = st.columns([1, 3], gap="large")

with col_btns:
    st.markdown("### Add Node")
    st.text_input(
        "Text", key="new_node_text",
        on_change=lambda: editor.dispatch(SetNewNodeText(st.session_state["new_node_text"])),
    )

    def _add_node():
        # AddNode() consumes the pending text; the input mirrors the cleared value
        editor.dispatch(SetNewNodeText(st.session_state["new_node_text"]))
        editor.dispatch(AddNode())
        st.session_state["new_node_text"] = editor.state.new_node_text

    st.button("Add Node", on_click=_add_node)
    cfg = editor.graph.config
    px = st.number_input("Drop x", value=0.0, step=10.0)
    py_ = st.number_input("Drop y", value=0.0, step=10.0)
    if st.button("Drop Text Node"):
        editor.dispatch(DropNode(cfg.node_type_tag, px, py_))
    st.divider()

    snap = editor.snapshot()
    ids = list(snap.node_ids())
    st.markdown("### Connect")
    if len(ids) >= 2:
        src = st.selectbox("Source", ids, key="src")
        dst = st.selectbox("Target", ids, key="dst")
        if st.button("Connect"):
            editor.dispatch(ConnectNodes(src, dst))
            if editor.state.last_edge_id is None:
                st.warning("Connection rejected (self loop, duplicate or unknown node).")
    st.divider()

    st.markdown("### Selected Node")
    choice = st.selectbox("Select", ["(none)"] + ids, key="sel")
    if choice == "(none)":
        editor.dispatch(ClearSelection())
    else:
        editor.dispatch(SelectNode(choice))
    selected = editor.snapshot().selected
    if selected is not None:
        text = st.text_input("Node text", value=selected.text, key=f"text_{selected.id}")
        if text != selected.text:
            editor.dispatch(UpdateSelectedText(text))
        if st.button("Delete Node"):
            editor.dispatch(DeleteSelected())
            st.rerun()
    st.divider()

    if st.button("Save Flow"):
        editor.dispatch(SaveFlow())
        if editor.state.last_save and editor.state.last_save.ok:
            st.success("Flow saved.")
    if st.button("New Flow"):
        editor.dispatch(ResetFlow())
        st.rerun()

    stats = editor.graph.get_stats()
    st.markdown(
        f"Nodes: {stats['nodes']}  \n"
        f"Edges: {stats['edges']}  \n"
        f"Terminal nodes: {stats['terminal']}"
    )
    if st.session_state.saved is not None:
        with st.expander("Last saved flow"):
            st.json(st.session_state.saved)

# --------- Build Plotly figure ----------
with col_plot:
    fig = go.Figure()
    snap = editor.snapshot()
    centers = {n.id: (n.x + NODE_W / 2, n.y + NODE_H / 2) for n in snap.nodes}
    sel_id = snap.selected.id if snap.selected else None

    # Draw edges as arrows
    for e in snap.edges:
        (x1, y1), (x2, y2) = centers[e.source], centers[e.target]
        fig.add_annotation(
            x=x2, y=y2, ax=x1, ay=y1,
            xref="x", yref="y", axref="x", ayref="y",
            showarrow=True, arrowhead=2, arrowwidth=1.5,
            arrowcolor="rgba(60,60,60,1)", standoff=14, startstandoff=14,
        )

    # Draw nodes
    fig.add_trace(go.Scatter(
        x=[centers[n.id][0] for n in snap.nodes],
        y=[centers[n.id][1] for n in snap.nodes],
        mode='markers+text',
        text=[f"{n.id}: {n.text}" for n in snap.nodes],
        textposition='middle center',
        marker=dict(
            symbol='square', size=28,
            color=['#ff6b6b' if n.id == sel_id else '#48dbfb' for n in snap.nodes],
            line=dict(width=2, color='#3498db'),
        ),
        hoverinfo='skip',
        showlegend=False
    ))

    # Screen y grows downward, like the desktop canvas
    fig.update_yaxes(scaleanchor="x", scaleratio=1, autorange="reversed")
    fig.update_layout(
        margin=dict(l=20, r=20, t=10, b=10),
        xaxis=dict(visible=False), yaxis=dict(visible=False),
        dragmode='pan', height=700
    )
    st.plotly_chart(fig, use_container_width=True)
