from sklearn.datasets import load_diabetes

from tunerf import Task, tune_rf

print("BUILD DIABETES REGRESSION TASK...")
diabetes = load_diabetes(as_frame=True)
task = Task.regression(diabetes.data, diabetes.target)

print("TUNE ALL FIVE PARAMETERS ON MAE...")
result = tune_rf(
    task,
    measure="mae",
    iters=50,
    num_trees=500,
    parameters={},
    tune_parameters=[
        "mtry",
        "min.node.size",
        "sample.fraction",
        "replace",
        "respect.unordered.factors",
    ],
    save_file_path="data/optpath_diabetes.pkl",
)

print("SAVE RESULTS...")
result.results.to_csv("data/tune_rf_diabetes_results.csv", index=False)

print("DONE.")
