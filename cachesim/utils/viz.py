import plotly.express as px
import pandas as pd

OUTCOME_COLORS = {"Hit": "#2ca02c", "Miss": "#d62728"}


def export_access_timeline(records, path: str):
    if not records:
        with open(path, "w") as f:
            f.write("<h1>Cache Access Timeline</h1><p>No data to display.</p>")
        return

    df = pd.DataFrame(records).rename(columns={'index': 'set_index'})
    # Ensure numeric types for the plotted columns, coercing errors
    df['sequence_number'] = pd.to_numeric(df['sequence_number'], errors='coerce')
    df['set_index'] = pd.to_numeric(df['set_index'], errors='coerce')
    df = df.dropna(subset=['sequence_number', 'set_index'])
    df['address_hex'] = df['address'].map(lambda a: f"{int(a):#010x}")

    hover_data_cols = ['operation', 'address_hex', 'tag', 'offset', 'size']
    existing_hover_cols = [c for c in hover_data_cols if c in df.columns]

    fig = px.scatter(
        df,
        x="sequence_number",
        y="set_index",
        color="outcome",
        symbol="operation" if "operation" in df.columns else None,
        hover_name="address_hex",
        hover_data=existing_hover_cols,
        color_discrete_map=OUTCOME_COLORS,
        title="Cache Access Timeline (Hit/Miss per Set)",
        labels={"sequence_number": "Reference", "set_index": "Set Index", "outcome": "Outcome"}
    )

    fig.update_yaxes(title="Set Index", dtick=1)
    fig.update_xaxes(title="Reference", range=[-1, df['sequence_number'].max() + 1])
    fig.update_layout(
        height=max(400, int(df['set_index'].nunique()) * 25),
        font=dict(family="Courier New, monospace", size=12),
        legend_title="Outcome"
    )

    fig.write_html(path, include_plotlyjs="cdn", full_html=True)


def export_hit_miss_ascii(records, width: int = 80):
    if not records:
        return "Trace is empty."

    # Group by set index
    set_lanes = {}
    for item in records:
        set_lanes.setdefault(item['index'], []).append(item)

    num_refs = len(records)
    scale = width / num_refs if num_refs > width else 1.0

    chart = ""
    chart += "Cache Access Timeline (ASCII, H=hit M=miss)\n"
    chart += "" + ("-" * (width + 10)) + "\n"

    for index in sorted(set_lanes.keys()):
        chart += f"set {index:>4} |"
        lane = ['.'] * min(num_refs, width)
        for item in set_lanes[index]:
            pos = min(int(item['sequence_number'] * scale), len(lane) - 1)
            # A miss anywhere in a compressed column wins over a hit
            if lane[pos] != 'M':
                lane[pos] = 'H' if item['outcome'] == "Hit" else 'M'
        chart += "".join(lane) + "\n"

    chart += "" + ("-" * (width + 10)) + "\n"
    chart += f"{num_refs} references\n"

    return chart
