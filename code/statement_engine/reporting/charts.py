import matplotlib.pyplot as plt


def plot_monthly(monthly, outpath, title):
    """Grouped income/expense bars per month from the Monthly table."""
    if monthly.empty:
        return False
    ax = monthly.set_index("month")[["income", "expense"]].plot(kind="bar")
    ax.set_xlabel("")
    ax.set_ylabel("Amount")
    plt.title(title)
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()
    return True
